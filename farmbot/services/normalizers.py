"""Tab payload normalizers, one per server view, each producing ``Task`` lists.

Cultivating and seeding tabs group a farm's plots by cultivation state
(``raw``, ``cleared``, ``plowed``) and gate each group with a
``canCultivate`` count. The harvest tab groups plots by crop type instead and
gates both the group and each plot with a ``canHarvest`` flag. Each view gets
its own normalizer so the shapes never share branching code.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, ClassVar

import structlog

from farmbot.schemas.tabs import FarmlandEntry, HarvestTab, StateGroups, StateTab
from farmbot.schemas.tasks import OperationType, Task
from farmbot.services.cooldown import HarvestCooldownTracker

_logger = structlog.get_logger("farmbot.normalizers")


class TabView(StrEnum):
	cultivating = "cultivating"
	seeding = "seeding"
	harvest = "harvest"


def _to_task(op_type: OperationType, farm_id: str, entry: FarmlandEntry) -> Task:
	return Task(
		type=op_type,
		farm_id=int(farm_id),
		farmland_id=entry.farmland_id,
		user_farmland_id=entry.id,
		area=entry.area,
		complexity_index=entry.complexity_index,
		farmland_name=entry.farmland_name,
	)


class StateViewNormalizer:
	"""Walks ``farms[farmId].farmlands[state].data[...]`` for the configured states."""

	view: ClassVar[TabView]
	states: ClassVar[tuple[tuple[str, OperationType], ...]]

	def normalize(self, payload: Mapping[str, Any]) -> list[Task]:
		tab = StateTab.model_validate(payload)
		if not tab.farms:
			_logger.debug("tab_without_farms", view=self.view.value)
			return []

		tasks: list[Task] = []
		for farm_id, farm in tab.farms.items():
			if farm.farmlands is None:
				continue
			tasks.extend(self._farm_tasks(farm_id, farm.farmlands))
		return tasks

	def _farm_tasks(self, farm_id: str, groups: StateGroups) -> list[Task]:
		tasks: list[Task] = []
		for state, op_type in self.states:
			group = getattr(groups, state)
			if group is None:
				continue
			if group.can_cultivate <= 0:
				if group.data:
					_logger.info(
						"state_group_gated",
						view=self.view.value,
						farm_id=farm_id,
						state=state,
						plots=len(group.data),
					)
				continue
			tasks.extend(_to_task(op_type, farm_id, entry) for entry in group.data.values())
		return tasks


class CultivatingViewNormalizer(StateViewNormalizer):
	view = TabView.cultivating
	states = (
		("cleared", OperationType.plowing),
		("raw", OperationType.clearing),
	)


class SeedingViewNormalizer(StateViewNormalizer):
	view = TabView.seeding
	states = (("plowed", OperationType.seeding),)


class HarvestViewNormalizer:
	"""Walks ``farms[farmId].farmlands[cropTypeId].data[...]``.

	A plot is emitted only when its crop group reports ``canHarvest == 1``,
	the plot itself reports ``canHarvest == 1``, and, when a cooldown tracker
	is supplied, the tracker agrees the plot instance is eligible again.
	"""

	view: ClassVar[TabView] = TabView.harvest

	def __init__(self, cooldown: HarvestCooldownTracker | None = None):
		self.cooldown = cooldown

	def normalize(self, payload: Mapping[str, Any]) -> list[Task]:
		tab = HarvestTab.model_validate(payload)
		if not tab.farms:
			_logger.debug("tab_without_farms", view=self.view.value)
			return []

		tasks: list[Task] = []
		for farm_id, farm in tab.farms.items():
			for crop_group in farm.farmlands.values():
				if crop_group.data is None or crop_group.can_harvest != 1:
					continue
				for entry in crop_group.data.values():
					if entry.can_harvest != 1:
						continue
					if self.cooldown is not None and not self.cooldown.can_harvest(entry.id):
						_logger.info(
							"harvest_cooldown_skip",
							farmland_name=entry.farmland_name,
							user_farmland_id=entry.id,
							minutes_remaining=self.cooldown.time_until_eligible(entry.id),
						)
						continue
					tasks.append(_to_task(OperationType.harvesting, farm_id, entry))
		return tasks


Normalizer = CultivatingViewNormalizer | SeedingViewNormalizer | HarvestViewNormalizer


def normalizer_for(view: TabView, cooldown: HarvestCooldownTracker | None = None) -> Normalizer:
	if view == TabView.cultivating:
		return CultivatingViewNormalizer()
	if view == TabView.seeding:
		return SeedingViewNormalizer()
	return HarvestViewNormalizer(cooldown)
