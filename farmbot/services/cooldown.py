"""Per-plot harvest cooldown cache."""

from __future__ import annotations

import math
import time
from collections.abc import Callable

import structlog

DEFAULT_HARVEST_INTERVAL_SECONDS = 6 * 60 * 60

_logger = structlog.get_logger("farmbot.cooldown")


class HarvestCooldownTracker:
	"""Remembers when each plot instance was last harvested by this process.

	The server accepts harvests more often than the game intends, so a plot
	instance is held back until ``interval_seconds`` have passed since the
	harvest this process recorded for it. Entries are never evicted; the
	keyspace is the account's plot instances, which is small and stable.
	"""

	def __init__(
		self,
		interval_seconds: float = DEFAULT_HARVEST_INTERVAL_SECONDS,
		clock: Callable[[], float] = time.time,
	):
		self.interval_seconds = interval_seconds
		self._clock = clock
		self._last_harvest: dict[int, float] = {}

	def __len__(self) -> int:
		return len(self._last_harvest)

	def record_harvest(self, user_farmland_id: int) -> None:
		now = self._clock()
		previous = self._last_harvest.get(user_farmland_id)
		self._last_harvest[user_farmland_id] = now if previous is None else max(previous, now)
		_logger.debug("harvest_recorded", user_farmland_id=user_farmland_id)

	def last_harvest(self, user_farmland_id: int) -> float | None:
		return self._last_harvest.get(user_farmland_id)

	def can_harvest(self, user_farmland_id: int) -> bool:
		last = self._last_harvest.get(user_farmland_id)
		if last is None:
			return True
		return self._clock() - last >= self.interval_seconds

	def time_until_eligible(self, user_farmland_id: int) -> int:
		"""Minutes (rounded up) until the plot may be harvested again."""
		last = self._last_harvest.get(user_farmland_id)
		if last is None:
			return 0
		remaining = self.interval_seconds - (self._clock() - last)
		return max(0, math.ceil(remaining / 60))

	def snapshot(self) -> dict[int, int]:
		return {plot_id: self.time_until_eligible(plot_id) for plot_id in self._last_harvest}
