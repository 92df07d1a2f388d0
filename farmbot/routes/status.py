"""Read-only bot status routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from farmbot.schemas.bot import BotStatusResponse, CooldownItem, CooldownResponse
from farmbot.services.bot import FarmBot

router = APIRouter(tags=["bot"])


def _require_bot(request: Request) -> FarmBot:
	bot = getattr(request.app.state, "bot", None)
	if bot is None:
		raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="bot not initialized")
	return bot


@router.get("/status", response_model=BotStatusResponse)
async def get_status(request: Request) -> BotStatusResponse:
	bot = _require_bot(request)
	return BotStatusResponse(
		running=bot.running,
		cycles_completed=bot.cycles_completed,
		check_interval_ms=bot.settings.check_interval_ms,
		last_error=bot.last_error,
		last_report=bot.last_report,
	)


@router.get("/cooldowns", response_model=CooldownResponse)
async def get_cooldowns(request: Request) -> CooldownResponse:
	bot = _require_bot(request)
	cooldown = bot.session.cooldown
	items = [
		CooldownItem(
			user_farmland_id=plot_id,
			minutes_remaining=minutes,
			eligible=minutes == 0,
		)
		for plot_id, minutes in sorted(cooldown.snapshot().items())
	]
	return CooldownResponse(interval_hours=cooldown.interval_seconds / 3600, items=items)
