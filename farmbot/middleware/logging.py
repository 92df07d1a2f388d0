"""Structured logging for the bot process and its status API."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import MutableMapping
from contextlib import AbstractContextManager
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from farmbot.config import LogFormat, Settings, get_settings

# Event keys whose values are game credentials.
SECRET_KEYS = frozenset({"phpsessid", "session", "session_id", "cookie", "password"})
_VISIBLE_PREFIX = 8

_configured = False


def mask_secrets(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
	"""Keep only a short prefix of session ids and drop passwords entirely."""
	for key in SECRET_KEYS.intersection(event_dict):
		value = event_dict[key]
		if not isinstance(value, str) or not value:
			continue
		if key == "password":
			event_dict[key] = "***"
		elif len(value) > _VISIBLE_PREFIX:
			event_dict[key] = f"{value[:_VISIBLE_PREFIX]}..."
	return event_dict


def cycle_log_context(cycle: int) -> AbstractContextManager[Any]:
	"""Tag every log line emitted inside one poll cycle with its number."""
	return structlog.contextvars.bound_contextvars(cycle=cycle)


def configure_structured_logging(settings: Settings | None = None) -> None:
	"""Configure stdlib + structlog once for the bot process."""
	global _configured
	if _configured:
		return

	settings = settings or get_settings()
	level_name = "debug" if settings.debug else settings.log_level
	log_level = getattr(logging, level_name.upper(), logging.INFO)

	processors: list[Any] = [
		structlog.contextvars.merge_contextvars,
		structlog.processors.add_log_level,
		structlog.processors.TimeStamper(fmt="iso", utc=True),
		mask_secrets,
	]

	if settings.log_format == LogFormat.json:
		processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
		logging.basicConfig(level=log_level, format="%(message)s")
	else:
		# ConsoleRenderer prints tracebacks itself.
		processors.append(structlog.dev.ConsoleRenderer())
		logging.basicConfig(level=log_level)

	structlog.configure(
		processors=processors,
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Request IDs and per-request timing for the status API.

	The access line also carries the bot's completed cycle count, so a status
	poll can be lined up with the cycle logs around it.
	"""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
		request.state.request_id = request_id
		logger = structlog.get_logger("farmbot.request")
		start = time.perf_counter()

		with structlog.contextvars.bound_contextvars(request_id=request_id):
			try:
				response = await call_next(request)
			except Exception as exc:
				logger.exception(
					"http_request_failed",
					method=request.method,
					path=request.url.path,
					duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
					error=str(exc),
				)
				raise

			bot = getattr(request.app.state, "bot", None)
			response.headers["x-request-id"] = request_id
			logger.info(
				"http_request",
				method=request.method,
				path=request.url.path,
				status_code=response.status_code,
				duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
				bot_cycles=bot.cycles_completed if bot is not None else None,
			)
		return response
