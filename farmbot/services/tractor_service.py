"""Idle tractor discovery and per-plot equipment matching."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from farmbot.schemas.equipment import (
	AvailableTractor,
	BatchActionUnit,
	EquipmentOption,
	EquipmentSelection,
)
from farmbot.schemas.tabs import CultivatingTab, FarmTractors
from farmbot.schemas.tasks import OPERATION_PRIORITY, OperationType
from farmbot.services.api_client import FarmApiClient

_logger = structlog.get_logger("farmbot.tractors")

# Order in which tractor groups are listed per farm.
_TRACTOR_GROUPS: tuple[OperationType, ...] = (
	OperationType.plowing,
	OperationType.clearing,
	OperationType.seeding,
	OperationType.harvesting,
)


def extract_available_tractors(tractors: Mapping[str, FarmTractors]) -> list[AvailableTractor]:
	available: list[AvailableTractor] = []
	for farm_id, farm_tractors in tractors.items():
		for op_type in _TRACTOR_GROUPS:
			group = getattr(farm_tractors, op_type.value)
			if group is None:
				continue
			available.extend(
				AvailableTractor(id=tractor.id, farm_id=int(farm_id), ha_hour=tractor.ha_hour, op_type=op_type)
				for tractor in group.data.values()
				if tractor.in_use == 0
			)
	return available


def _match_operation(
	equipment: Mapping[str, Any],
	op_type: OperationType,
	idle_tractors: Sequence[AvailableTractor],
	farm_id: int,
) -> EquipmentSelection | None:
	raw_option = equipment.get(op_type.value)
	if not raw_option:
		return None
	option = EquipmentOption.model_validate(raw_option)
	if not option.usable:
		return None

	unit = option.units[0]
	tractor_id = unit.id or unit.heavy_id or 0

	# Implement-based operations list the implement only; the pulling tractor
	# comes from the idle pool, same farm first.
	if tractor_id == 0 and unit.implement_id:
		tractor = next(
			(t for t in idle_tractors if t.op_type == op_type and t.farm_id == farm_id),
			None,
		)
		if tractor is None:
			tractor = next((t for t in idle_tractors if t.op_type == op_type), None)
			if tractor is not None:
				_logger.debug("tractor_from_other_farm", op_type=op_type.value, tractor_id=tractor.id)
		if tractor is not None:
			tractor_id = tractor.id

	if tractor_id == 0:
		_logger.debug("equipment_without_tractor", op_type=op_type.value)
		return None

	return EquipmentSelection(tractor_id=tractor_id, implement_id=unit.implement_id, op_type=op_type)


def resolve_equipment(
	equipment: Mapping[str, Any] | None,
	idle_tractors: Sequence[AvailableTractor],
	farm_id: int,
	desired_op: OperationType | None = None,
) -> EquipmentSelection | None:
	"""First usable tractor/implement, trying ``desired_op`` before the fixed priority."""
	if not equipment:
		return None

	candidates: list[OperationType] = []
	if desired_op is not None:
		candidates.append(desired_op)
	candidates.extend(op for op in OPERATION_PRIORITY if op != desired_op)

	for op_type in candidates:
		selection = _match_operation(equipment, op_type, idle_tractors, farm_id)
		if selection is not None:
			return selection
		if op_type == desired_op:
			_logger.debug("desired_equipment_unavailable", op_type=op_type.value)
	return None


def build_batch_units(tractor_id: int, implement_id: int | None = None) -> dict[str, BatchActionUnit]:
	return {str(tractor_id): BatchActionUnit(tractor_id=tractor_id, implement_id=implement_id or None)}


class TractorService:
	def __init__(self, api: FarmApiClient):
		self.api = api

	async def get_available_tractors(self) -> list[AvailableTractor]:
		tab = CultivatingTab.model_validate(await self.api.get_cultivating_tab())
		return extract_available_tractors(tab.tractors)

	async def get_tractors_for_operation(self, op_type: OperationType) -> list[AvailableTractor]:
		return [t for t in await self.get_available_tractors() if t.op_type == op_type]

	async def get_tractors_in_farm(self, farm_id: int) -> list[AvailableTractor]:
		return [t for t in await self.get_available_tractors() if t.farm_id == farm_id]

	async def get_best_tractor_for_task(self, farm_id: int, op_type: OperationType) -> AvailableTractor | None:
		compatible = [t for t in await self.get_tractors_in_farm(farm_id) if t.op_type == op_type]
		if not compatible:
			return None
		return max(compatible, key=lambda tractor: tractor.ha_hour)

	async def get_equipment_for_farmland(
		self,
		farmland_id: int,
		desired_op: OperationType | None = None,
		farm_id: int | None = None,
	) -> EquipmentSelection | None:
		details = await self.api.get_farmland_details(farmland_id)
		equipment = details.get("equipment")
		if not equipment:
			_logger.debug("farmland_without_equipment", farmland_id=farmland_id)
			return None

		idle = await self.get_available_tractors()
		if farm_id is None:
			farm_id = int(details.get("farmId") or 0)
		selection = resolve_equipment(equipment, idle, farm_id, desired_op)
		_logger.debug(
			"equipment_resolved",
			farmland_id=farmland_id,
			desired_op=desired_op.value if desired_op else None,
			selection=selection.model_dump() if selection else None,
		)
		return selection
