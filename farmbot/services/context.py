"""Long-lived per-process state shared by the services of one bot."""

from __future__ import annotations

from dataclasses import dataclass, field

from farmbot.config import Settings
from farmbot.services.cooldown import HarvestCooldownTracker


@dataclass(slots=True)
class BotSession:
	cooldown: HarvestCooldownTracker = field(default_factory=HarvestCooldownTracker)
	sell_delay_seconds: float = 0.5
	silo_sell_threshold: float = 90

	@classmethod
	def from_settings(cls, settings: Settings) -> BotSession:
		return cls(
			cooldown=HarvestCooldownTracker(interval_seconds=settings.harvest_cooldown_hours * 3600),
			sell_delay_seconds=settings.sell_delay_ms / 1000,
			silo_sell_threshold=settings.silo_sell_threshold,
		)
