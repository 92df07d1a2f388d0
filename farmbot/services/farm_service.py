"""Task discovery across the cultivating, seeding and harvest tabs."""

from __future__ import annotations

from typing import Any

import structlog

from farmbot.schemas.tabs import CultivatingTab
from farmbot.schemas.tasks import Task, TaskCounts
from farmbot.services.api_client import FarmApiClient
from farmbot.services.context import BotSession
from farmbot.services.normalizers import (
	CultivatingViewNormalizer,
	HarvestViewNormalizer,
	SeedingViewNormalizer,
)

_logger = structlog.get_logger("farmbot.farm")


class FarmService:
	"""Fetches tab payloads and turns them into ready-to-dispatch tasks."""

	def __init__(self, api: FarmApiClient, session: BotSession):
		self.api = api
		self.session = session

	async def get_cultivating_tasks(self) -> list[Task]:
		payload = await self.api.get_cultivating_tab()
		tasks = CultivatingViewNormalizer().normalize(payload)
		_logger.debug("tasks_found", view="cultivating", count=len(tasks))
		return tasks

	async def get_seeding_tasks(self) -> list[Task]:
		payload = await self.api.get_seeding_tab()
		tasks = SeedingViewNormalizer().normalize(payload)
		_logger.debug("tasks_found", view="seeding", count=len(tasks))
		return tasks

	async def get_harvesting_tasks(self) -> list[Task]:
		payload = await self.api.get_harvest_tab()
		tasks = HarvestViewNormalizer(self.session.cooldown).normalize(payload)
		_logger.debug("tasks_found", view="harvest", count=len(tasks))
		return tasks

	async def get_task_counts(self) -> TaskCounts:
		tab = CultivatingTab.model_validate(await self.api.get_cultivating_tab())
		return TaskCounts.model_validate(tab.count)

	async def get_farmland_details(self, farmland_id: int) -> dict[str, Any]:
		return await self.api.get_farmland_details(farmland_id)

	def record_harvest(self, user_farmland_id: int) -> None:
		self.session.cooldown.record_harvest(user_farmland_id)
