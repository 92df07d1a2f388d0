"""Async HTTP transport for the farming game API."""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from farmbot.config import get_settings
from farmbot.schemas.equipment import BatchActionUnit
from farmbot.schemas.tasks import OperationType

USER_AGENT = (
	"Mozilla/5.0 (iPhone; CPU iPhone OS 18_5 like Mac OS X) AppleWebKit/605.1.15 "
	"(KHTML, like Gecko) Version/18.5 Mobile/15E148 Safari/604.1"
)

DEFAULT_HEADERS = {
	"User-Agent": USER_AGENT,
	"Accept": "application/json, text/plain, */*",
	"Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
	"X-Requested-With": "XMLHttpRequest",
}

ENDPOINTS = {
	"cultivating_tab": "/api/tabs/cultivating.php",
	"seeding_tab": "/api/tabs/seeding.php",
	"harvest_tab": "/api/tabs/harvest.php",
	"silo_tab": "/api/tabs/silo.php",
	"farmland_details": "/api/farmland/details.php",
	"market_seeds": "/api/market/seeds.php",
	"crop_values": "/api/market/crop-values.php",
	"batch_action": "/api/farmland/batch-action.php",
	"buy_seeds": "/api/market/buy-seeds.php",
	"sell_product": "/api/market/sell-product.php",
}

_logger = structlog.get_logger("farmbot.api")


class FarmApiError(RuntimeError):
	"""Raised when a game API call fails at the transport or protocol level."""

	def __init__(self, message: str, status_code: int | None = None) -> None:
		super().__init__(message)
		self.status_code = status_code


class SessionExpiredError(FarmApiError):
	"""Raised when the server no longer accepts the current PHPSESSID."""


def session_cookie(session_id: str | None) -> str:
	return f"PHPSESSID={session_id}; device=web" if session_id else "device=web"


class FarmApiClient:
	def __init__(
		self,
		session_id: str,
		*,
		base_url: str | None = None,
		timeout: float | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		settings = get_settings()
		self.session_id = session_id
		self._client = httpx.AsyncClient(
			base_url=base_url or settings.farm_base_url,
			headers=DEFAULT_HEADERS,
			timeout=timeout or settings.request_timeout_seconds,
			follow_redirects=False,
			transport=transport,
		)

	async def __aenter__(self) -> FarmApiClient:
		return self

	async def __aexit__(self, *_exc: object) -> None:
		await self.aclose()

	async def aclose(self) -> None:
		await self._client.aclose()

	def set_session(self, session_id: str) -> None:
		self.session_id = session_id

	# ── Reads ──────────────────────────────────────────────────────────────

	async def get_cultivating_tab(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["cultivating_tab"])

	async def get_seeding_tab(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["seeding_tab"])

	async def get_harvest_tab(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["harvest_tab"])

	async def get_silo_tab(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["silo_tab"])

	async def get_farmland_details(self, farmland_id: int) -> dict[str, Any]:
		return await self._request(
			"GET",
			ENDPOINTS["farmland_details"],
			params={"farmlandId": farmland_id},
		)

	async def get_market_seeds(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["market_seeds"])

	async def get_crop_values(self) -> dict[str, Any]:
		return await self._request("GET", ENDPOINTS["crop_values"])

	# ── Actions ────────────────────────────────────────────────────────────

	async def start_operation(
		self,
		op_type: OperationType,
		*,
		farmland_id: int,
		user_farmland_id: int,
		units: dict[str, BatchActionUnit],
		crop_id: int | None = None,
	) -> dict[str, Any]:
		body: dict[str, Any] = {
			"mode": op_type.value,
			"farmlandId": farmland_id,
			"userFarmlandId": user_farmland_id,
			"units": {
				key: unit.model_dump(by_alias=True, exclude_none=True)
				for key, unit in units.items()
			},
		}
		if crop_id is not None:
			body["cropId"] = crop_id
		return await self._request("POST", ENDPOINTS["batch_action"], json=body)

	async def buy_seeds(self, crop_id: int, amount: int) -> dict[str, Any]:
		return await self._request(
			"POST",
			ENDPOINTS["buy_seeds"],
			json={"cropId": crop_id, "amount": amount},
		)

	async def sell_product(self, crop_id: int, amount: int | str = "all") -> dict[str, Any]:
		return await self._request(
			"POST",
			ENDPOINTS["sell_product"],
			json={"cropId": crop_id, "amount": amount},
		)

	async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
		start = time.perf_counter()
		headers = {"Cookie": session_cookie(self.session_id)}
		try:
			response = await self._client.request(method, path, headers=headers, **kwargs)
		except httpx.HTTPError as exc:
			_logger.warning("api_call_failed", method=method, path=path, error=str(exc))
			raise FarmApiError(f"{method} {path} failed: {exc}") from exc

		duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
		_logger.debug(
			"api_call",
			method=method,
			path=path,
			status_code=response.status_code,
			duration_ms=duration_ms,
		)

		if response.status_code in (401, 403) or self._is_login_redirect(response):
			raise SessionExpiredError(
				f"{method} {path}: session rejected",
				status_code=response.status_code,
			)
		if response.status_code >= 400:
			raise FarmApiError(
				f"{method} {path} returned HTTP {response.status_code}",
				status_code=response.status_code,
			)

		try:
			payload = response.json()
		except ValueError as exc:
			raise FarmApiError(
				f"{method} {path} returned a non-JSON body",
				status_code=response.status_code,
			) from exc
		if not isinstance(payload, dict):
			raise FarmApiError(
				f"{method} {path} returned {type(payload).__name__}, expected an object",
				status_code=response.status_code,
			)
		return payload

	@staticmethod
	def _is_login_redirect(response: httpx.Response) -> bool:
		if not response.is_redirect:
			return False
		return "login" in response.headers.get("location", "")
