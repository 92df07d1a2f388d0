"""Polling driver: one sequential cycle of discovery, dispatch and sales."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from farmbot.auth.session import AuthError, MissingCredentialsError, SessionManager
from farmbot.config import Settings
from farmbot.middleware.logging import cycle_log_context
from farmbot.schemas.bot import CycleReport, DispatchedAction, SkippedTask
from farmbot.schemas.tasks import OperationType, Task
from farmbot.services.api_client import FarmApiClient, FarmApiError, SessionExpiredError
from farmbot.services.context import BotSession
from farmbot.services.farm_service import FarmService
from farmbot.services.market_service import MarketService, summarize_sales
from farmbot.services.seed_service import SeedService
from farmbot.services.silo_service import SiloService
from farmbot.services.tractor_service import TractorService, build_batch_units

_logger = structlog.get_logger("farmbot.bot")


class FarmBot:
	"""Runs poll cycles one at a time against a single game account.

	A cycle harvests, then clears/plows, then seeds, then sells silo stock
	above the configured fill threshold. Cycles are serialized by a lock and
	a stop request is only honoured between cycles, so a seed purchase is
	never left without its planting action.
	"""

	def __init__(
		self,
		api: FarmApiClient,
		session: BotSession,
		settings: Settings,
		session_manager: SessionManager | None = None,
	):
		self.api = api
		self.session = session
		self.settings = settings
		self.session_manager = session_manager

		self.farm = FarmService(api, session)
		self.seeds = SeedService(api)
		self.tractors = TractorService(api)
		self.silo = SiloService(api)
		self.market = MarketService(api, session)

		self._cycle_lock = asyncio.Lock()
		self.running = False
		self.cycles_completed = 0
		self.last_report: CycleReport | None = None
		self.last_error: str | None = None

	@property
	def cycle_in_progress(self) -> bool:
		return self._cycle_lock.locked()

	async def run(self, stop_event: asyncio.Event) -> None:
		interval_seconds = self.settings.check_interval_ms / 1000
		self.running = True
		_logger.info("bot_started", interval_ms=self.settings.check_interval_ms)
		try:
			while not stop_event.is_set():
				await self.run_guarded_cycle()
				try:
					await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
				except TimeoutError:
					continue
		finally:
			self.running = False
			_logger.info("bot_stopped", cycles_completed=self.cycles_completed)

	async def run_guarded_cycle(self) -> CycleReport | None:
		"""Run one cycle, logging failures instead of raising them."""
		try:
			report = await self.run_cycle()
		except SessionExpiredError as exc:
			self.last_error = str(exc)
			_logger.warning("session_expired", error=str(exc))
			await self._refresh_session()
			return None
		except (FarmApiError, ValidationError) as exc:
			self.last_error = str(exc)
			_logger.error("cycle_failed", error=str(exc))
			return None
		except Exception as exc:
			self.last_error = str(exc)
			_logger.exception("cycle_crashed", error=str(exc))
			return None
		self.last_error = None
		return report

	async def run_cycle(self) -> CycleReport:
		async with self._cycle_lock:
			report = CycleReport(cycle=self.cycles_completed + 1, started_at=datetime.now(UTC))
			with cycle_log_context(report.cycle):
				await self._run_category("harvesting", self.farm.get_harvesting_tasks, report)
				await self._run_category("cultivating", self.farm.get_cultivating_tasks, report)
				await self._run_category("seeding", self.farm.get_seeding_tasks, report)
				await self._manage_silo(report)

			report.completed_at = datetime.now(UTC)
			self.cycles_completed += 1
			self.last_report = report
			_logger.info(
				"cycle_completed",
				cycle=report.cycle,
				tasks_found=report.tasks_found,
				dispatched=len(report.dispatched),
				skipped=len(report.skipped),
			)
			return report

	async def _run_category(
		self,
		category: str,
		fetch: Callable[[], Awaitable[list[Task]]],
		report: CycleReport,
	) -> None:
		tasks = await fetch()
		report.tasks_found[category] = len(tasks)
		for task in tasks:
			await self._process_task(task, report)

	async def _process_task(self, task: Task, report: CycleReport) -> None:
		selection = await self.tractors.get_equipment_for_farmland(
			task.farmland_id,
			task.type,
			farm_id=task.farm_id,
		)
		if selection is None:
			_logger.info("task_skipped", reason="no_equipment", farmland=task.farmland_name, op=task.type.value)
			report.skipped.append(SkippedTask(task=task, reason="no_equipment"))
			return

		if selection.op_type != task.type:
			_logger.info(
				"equipment_fallback",
				farmland=task.farmland_name,
				requested=task.type.value,
				matched=selection.op_type.value,
			)

		crop_id: int | None = None
		if selection.op_type == OperationType.seeding:
			seed = await self.seeds.prepare_for_seeding(task.farmland_id, task.area)
			if seed is None:
				report.skipped.append(SkippedTask(task=task, reason="no_seed"))
				return
			crop_id = seed.crop_id

		response = await self.api.start_operation(
			selection.op_type,
			farmland_id=task.farmland_id,
			user_farmland_id=task.user_farmland_id,
			units=build_batch_units(selection.tractor_id, selection.implement_id),
			crop_id=crop_id,
		)
		success = response.get("success") == 1
		if success and selection.op_type == OperationType.harvesting:
			self.farm.record_harvest(task.user_farmland_id)

		_logger.info(
			"operation_dispatched" if success else "operation_rejected",
			farmland=task.farmland_name,
			op=selection.op_type.value,
			tractor_id=selection.tractor_id,
			area_ha=task.area,
		)
		report.dispatched.append(
			DispatchedAction(
				task=task,
				op_type=selection.op_type,
				tractor_id=selection.tractor_id,
				implement_id=selection.implement_id,
				crop_id=crop_id,
				success=success,
			)
		)

	async def _manage_silo(self, report: CycleReport) -> None:
		products = await self.silo.get_products_above_threshold(self.session.silo_sell_threshold)
		report.products_over_threshold = products
		if not products:
			return

		_logger.info(
			"silo_over_threshold",
			threshold=self.session.silo_sell_threshold,
			products=[product.name for product in products],
		)
		results = await self.market.sell_all(products)
		report.sales = summarize_sales(results)
		_logger.info("sales_summary", **report.sales.model_dump())

	async def _refresh_session(self) -> None:
		if self.session_manager is None or not self.session_manager.can_relogin:
			_logger.error("session_refresh_unavailable")
			return
		try:
			session_id = await self.session_manager.refresh()
		except (AuthError, MissingCredentialsError) as exc:
			_logger.error("session_refresh_failed", error=str(exc))
			return
		self.api.set_session(session_id)
