"""Pydantic schemas for tractors and per-plot equipment descriptors."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from farmbot.schemas.tabs import _absent
from farmbot.schemas.tasks import OperationType


def _listed(value: Any) -> Any:
	if value is None:
		return []
	if isinstance(value, dict):
		return list(value.values())
	return value


class AvailableTractor(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: int
	farm_id: int
	ha_hour: float
	op_type: OperationType


class EquipmentUnit(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: int | None = None
	heavy_id: int | None = Field(default=None, alias="heavyId")
	implement_id: int | None = Field(default=None, alias="implementId")


class EquipmentAvailability(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	available: int = 0


class EquipmentOption(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	data: Annotated[EquipmentAvailability | None, BeforeValidator(_absent)] = None
	units: Annotated[list[EquipmentUnit], BeforeValidator(_listed)] = Field(default_factory=list)

	@property
	def usable(self) -> bool:
		return self.data is not None and self.data.available > 0 and bool(self.units)


class EquipmentSelection(BaseModel):
	tractor_id: int
	implement_id: int | None = None
	op_type: OperationType


class BatchActionUnit(BaseModel):
	tractor_id: int = Field(serialization_alias="tractorId")
	implement_id: int | None = Field(default=None, serialization_alias="implementId")
