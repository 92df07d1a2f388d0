from __future__ import annotations

import json

import httpx
import pytest

from farmbot.schemas.tasks import OperationType
from farmbot.services.api_client import ENDPOINTS, FarmApiClient, FarmApiError, SessionExpiredError
from farmbot.services.tractor_service import build_batch_units


def _client(handler, session_id: str = "abc123") -> FarmApiClient:
	return FarmApiClient(
		session_id,
		base_url="https://game.test",
		timeout=5,
		transport=httpx.MockTransport(handler),
	)


@pytest.mark.asyncio
async def test_reads_send_session_cookie_and_return_payload() -> None:
	seen: list[httpx.Request] = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(request)
		return httpx.Response(200, json={"farms": {}})

	async with _client(handler) as api:
		assert await api.get_cultivating_tab() == {"farms": {}}
		await api.get_farmland_details(13)

	assert seen[0].url.path == ENDPOINTS["cultivating_tab"]
	assert seen[0].headers["cookie"] == "PHPSESSID=abc123; device=web"
	assert seen[0].headers["x-requested-with"] == "XMLHttpRequest"
	assert seen[1].url.params["farmlandId"] == "13"


@pytest.mark.asyncio
async def test_set_session_changes_cookie() -> None:
	cookies: list[str] = []

	def handler(request: httpx.Request) -> httpx.Response:
		cookies.append(request.headers["cookie"])
		return httpx.Response(200, json={})

	async with _client(handler) as api:
		await api.get_silo_tab()
		api.set_session("renewed")
		await api.get_silo_tab()

	assert cookies == ["PHPSESSID=abc123; device=web", "PHPSESSID=renewed; device=web"]


@pytest.mark.asyncio
async def test_start_operation_body() -> None:
	bodies: list[dict] = []

	def handler(request: httpx.Request) -> httpx.Response:
		bodies.append(json.loads(request.content))
		return httpx.Response(200, json={"success": 1})

	async with _client(handler) as api:
		response = await api.start_operation(
			OperationType.seeding,
			farmland_id=14,
			user_farmland_id=104,
			units=build_batch_units(92, 93),
			crop_id=2,
		)
		await api.start_operation(
			OperationType.clearing,
			farmland_id=11,
			user_farmland_id=101,
			units=build_batch_units(91),
		)

	assert response == {"success": 1}
	assert bodies[0] == {
		"mode": "seeding",
		"farmlandId": 14,
		"userFarmlandId": 104,
		"units": {"92": {"tractorId": 92, "implementId": 93}},
		"cropId": 2,
	}
	assert "cropId" not in bodies[1]
	assert bodies[1]["units"] == {"91": {"tractorId": 91}}


@pytest.mark.asyncio
async def test_buy_and_sell_bodies() -> None:
	bodies: dict[str, dict] = {}

	def handler(request: httpx.Request) -> httpx.Response:
		bodies[request.url.path] = json.loads(request.content)
		return httpx.Response(200, json={"success": 1})

	async with _client(handler) as api:
		await api.buy_seeds(2, 70)
		await api.sell_product(1)

	assert bodies[ENDPOINTS["buy_seeds"]] == {"cropId": 2, "amount": 70}
	assert bodies[ENDPOINTS["sell_product"]] == {"cropId": 1, "amount": "all"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(401),
		httpx.Response(403),
		httpx.Response(302, headers={"location": "/index-login.php"}),
	],
)
async def test_rejected_session_raises_session_expired(response: httpx.Response) -> None:
	async with _client(lambda request: response) as api:
		with pytest.raises(SessionExpiredError):
			await api.get_harvest_tab()


@pytest.mark.asyncio
async def test_server_error_raises_with_status() -> None:
	async with _client(lambda request: httpx.Response(500)) as api:
		with pytest.raises(FarmApiError) as exc_info:
			await api.get_market_seeds()

	assert exc_info.value.status_code == 500
	assert not isinstance(exc_info.value, SessionExpiredError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(200, text="<html>maintenance</html>"),
		httpx.Response(200, json=[1, 2, 3]),
	],
)
async def test_unexpected_body_raises(response: httpx.Response) -> None:
	async with _client(lambda request: response) as api:
		with pytest.raises(FarmApiError):
			await api.get_crop_values()


@pytest.mark.asyncio
async def test_transport_error_is_wrapped() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	async with _client(handler) as api:
		with pytest.raises(FarmApiError) as exc_info:
			await api.get_seeding_tab()

	assert exc_info.value.status_code is None
	assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
