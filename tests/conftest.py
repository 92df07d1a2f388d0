"""Shared pytest fixtures: a fake game API, a controllable clock and the status API client."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from farmbot.config import Settings
from farmbot.main import app
from farmbot.services.bot import FarmBot
from farmbot.services.context import BotSession
from farmbot.services.cooldown import HarvestCooldownTracker

HOUR = 60 * 60


class FakeClock:
	def __init__(self, start: float = 1_700_000_000.0) -> None:
		self.now = start

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


class FakeFarmApi:
	"""In-memory stand-in for ``FarmApiClient`` with mutable tab payloads."""

	def __init__(self) -> None:
		self.cultivating_tab: dict[str, Any] = {"farms": {}, "tractors": {}, "count": {}}
		self.seeding_tab: dict[str, Any] = {"farms": {}, "seed": {}}
		self.harvest_tab: dict[str, Any] = {"farms": {}}
		self.silo_tab: dict[str, Any] = {
			"cropSilo": {"siloCapacity": 100000, "totalHolding": 0, "pctFull": 0, "holding": {}}
		}
		self.farmland_details: dict[int, dict[str, Any]] = {}
		self.market_seeds: dict[str, Any] = {"seed": []}
		self.crop_values: dict[str, Any] = {"cropValues": {}, "history": {}}

		self.get_cultivating_tab = AsyncMock(side_effect=lambda: self.cultivating_tab)
		self.get_seeding_tab = AsyncMock(side_effect=lambda: self.seeding_tab)
		self.get_harvest_tab = AsyncMock(side_effect=lambda: self.harvest_tab)
		self.get_silo_tab = AsyncMock(side_effect=lambda: self.silo_tab)
		self.get_farmland_details = AsyncMock(side_effect=lambda farmland_id: self.farmland_details.get(farmland_id, {}))
		self.get_market_seeds = AsyncMock(side_effect=lambda: self.market_seeds)
		self.get_crop_values = AsyncMock(side_effect=lambda: self.crop_values)
		self.start_operation = AsyncMock(return_value={"success": 1})
		self.buy_seeds = AsyncMock(side_effect=lambda crop_id, amount: {"success": 1, "amount": amount, "cost": amount * 2})
		self.sell_product = AsyncMock(
			side_effect=lambda crop_id, amount="all": {
				"success": 1,
				"amount": 1000,
				"income": 2500,
				"remaining": 0,
				"cropData": {"name": f"Crop {crop_id}"},
			}
		)
		self.set_session = MagicMock()


def farmland(
	user_farmland_id: int,
	farmland_id: int,
	*,
	area: float = 1.0,
	name: str | None = None,
	complexity: float | None = None,
	can_harvest: int | None = None,
) -> dict[str, Any]:
	entry: dict[str, Any] = {
		"id": user_farmland_id,
		"farmlandId": farmland_id,
		"area": area,
		"farmlandName": name or f"Field {user_farmland_id}",
	}
	if complexity is not None:
		entry["complexityIndex"] = complexity
	if can_harvest is not None:
		entry["canHarvest"] = can_harvest
	return entry


def state_group(can_cultivate: int, *entries: dict[str, Any]) -> dict[str, Any]:
	return {
		"canCultivate": can_cultivate,
		"data": {str(entry["id"]): entry for entry in entries},
	}


def crop_group(can_harvest: int, *entries: dict[str, Any]) -> dict[str, Any]:
	return {
		"canHarvest": can_harvest,
		"data": {str(entry["id"]): entry for entry in entries},
	}


def tractor(tractor_id: int, *, ha_hour: float = 5.0, in_use: int = 0) -> dict[str, Any]:
	return {"id": tractor_id, "haHour": ha_hour, "inUse": in_use}


@pytest.fixture
def clock() -> FakeClock:
	return FakeClock()


@pytest.fixture
def cooldown(clock: FakeClock) -> HarvestCooldownTracker:
	return HarvestCooldownTracker(interval_seconds=6 * HOUR, clock=clock)


@pytest.fixture
def bot_session(cooldown: HarvestCooldownTracker) -> BotSession:
	return BotSession(cooldown=cooldown, sell_delay_seconds=0, silo_sell_threshold=90)


@pytest.fixture
def fake_api() -> FakeFarmApi:
	return FakeFarmApi()


@pytest.fixture
def settings() -> Settings:
	return Settings(
		farm_email="",
		farm_password="",
		phpsessid="manual-session",
		check_interval_ms=10,
		sell_delay_ms=0,
	)


@pytest.fixture
def bot(fake_api: FakeFarmApi, bot_session: BotSession, settings: Settings) -> FarmBot:
	return FarmBot(fake_api, bot_session, settings)  # type: ignore[arg-type]


@pytest.fixture
async def client(bot: FarmBot) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and a pre-built bot on app state."""
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan
	app.state.bot = bot

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	del app.state.bot
