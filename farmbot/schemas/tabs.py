"""Pydantic shapes for the raw tab payloads returned by the game API.

The server is PHP-backed and not consistent about its containers: keyed
collections come back as JSON objects when populated and as empty JSON
arrays when not. ``_keyed`` folds both into a ``dict``; ``_object`` and
``_absent`` turn an empty array standing in for an object into an empty
object or ``None``. The normalizers only ever see one shape.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def _keyed(value: Any) -> Any:
	if value is None:
		return {}
	if isinstance(value, list):
		return {str(idx): item for idx, item in enumerate(value)}
	return value


def _object(value: Any) -> Any:
	if value is None or (isinstance(value, list) and not value):
		return {}
	return value


def _absent(value: Any) -> Any:
	if isinstance(value, list) and not value:
		return None
	return value


class _Payload(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FarmlandEntry(_Payload):
	id: int
	farmland_id: int = Field(alias="farmlandId")
	area: float = 0.0
	complexity_index: float = Field(default=1.0, alias="complexityIndex")
	farmland_name: str = Field(default="", alias="farmlandName")
	can_harvest: int = Field(default=0, alias="canHarvest")

	@field_validator("complexity_index", mode="before")
	@classmethod
	def _default_complexity(cls, value: Any) -> Any:
		return 1.0 if value is None else value


FarmlandMap = Annotated[dict[str, FarmlandEntry], BeforeValidator(_keyed)]


class StateGroup(_Payload):
	can_cultivate: int = Field(default=0, alias="canCultivate")
	data: FarmlandMap = Field(default_factory=dict)


OptionalStateGroup = Annotated[StateGroup | None, BeforeValidator(_absent)]


class StateGroups(_Payload):
	raw: OptionalStateGroup = None
	cleared: OptionalStateGroup = None
	plowed: OptionalStateGroup = None


class StateFarm(_Payload):
	farmlands: Annotated[StateGroups | None, BeforeValidator(_absent)] = None


class StateTab(_Payload):
	farms: Annotated[
		dict[str, Annotated[StateFarm, BeforeValidator(_object)]] | None,
		BeforeValidator(_absent),
	] = None


class CropGroup(_Payload):
	can_harvest: int = Field(default=0, alias="canHarvest")
	data: Annotated[FarmlandMap | None, BeforeValidator(_absent)] = None


class HarvestFarm(_Payload):
	farmlands: Annotated[
		dict[str, Annotated[CropGroup, BeforeValidator(_object)]],
		BeforeValidator(_keyed),
	] = Field(default_factory=dict)


class TractorEntry(_Payload):
	id: int
	ha_hour: float = Field(default=0.0, alias="haHour")
	in_use: int = Field(default=1, alias="inUse")


class TractorGroup(_Payload):
	data: Annotated[dict[str, TractorEntry], BeforeValidator(_keyed)] = Field(default_factory=dict)


OptionalTractorGroup = Annotated[TractorGroup | None, BeforeValidator(_absent)]


class FarmTractors(_Payload):
	plowing: OptionalTractorGroup = None
	clearing: OptionalTractorGroup = None
	seeding: OptionalTractorGroup = None
	harvesting: OptionalTractorGroup = None


class CultivatingTab(StateTab):
	tractors: Annotated[dict[str, FarmTractors], BeforeValidator(_keyed)] = Field(default_factory=dict)
	count: Annotated[dict[str, int], BeforeValidator(_keyed)] = Field(default_factory=dict)


class SeedStock(_Payload):
	amount: float = 0


class SeedingTab(StateTab):
	seed: Annotated[dict[str, SeedStock], BeforeValidator(_keyed)] = Field(default_factory=dict)


class HarvestTab(_Payload):
	farms: Annotated[
		dict[str, Annotated[HarvestFarm, BeforeValidator(_object)]] | None,
		BeforeValidator(_absent),
	] = None
