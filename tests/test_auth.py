from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from farmbot.auth.session import (
	LOGIN_CHECK_PATH,
	LOGIN_PAGE_PATH,
	AuthError,
	AuthService,
	MissingCredentialsError,
	SessionManager,
	extract_session_id,
)
from farmbot.config import Settings


def _service(handler) -> AuthService:
	return AuthService(base_url="https://game.test", timeout=5, transport=httpx.MockTransport(handler))


def _login_handler(check_response: httpx.Response, *, initial_cookie: str | None = "PHPSESSID=initial1; path=/"):
	requests: list[httpx.Request] = []

	def handler(request: httpx.Request) -> httpx.Response:
		requests.append(request)
		if request.url.path == LOGIN_PAGE_PATH:
			headers = {"set-cookie": initial_cookie} if initial_cookie else {}
			return httpx.Response(200, headers=headers, text="<form></form>")
		assert request.url.path == LOGIN_CHECK_PATH
		return check_response

	return handler, requests


def test_extract_session_id() -> None:
	assert extract_session_id(["device=web", "PHPSESSID=xyz789; path=/; HttpOnly"]) == "xyz789"
	assert extract_session_id(["device=web"]) is None
	assert extract_session_id([]) is None


@pytest.mark.asyncio
async def test_login_returns_session_from_login_response() -> None:
	handler, requests = _login_handler(
		httpx.Response(302, headers={"set-cookie": "PHPSESSID=authed42; path=/", "location": "/"})
	)

	session_id = await _service(handler).login("farmer@example.com", "hunter2")

	assert session_id == "authed42"
	form = requests[1]
	assert form.method == "POST"
	assert form.headers["cookie"] == "PHPSESSID=initial1; device=web"
	assert form.headers["content-type"] == "application/x-www-form-urlencoded"
	assert b"email=farmer%40example.com" in form.content


@pytest.mark.asyncio
async def test_login_reuses_initial_session_when_none_is_issued() -> None:
	handler, _ = _login_handler(httpx.Response(200, text="welcome"))

	assert await _service(handler).login("farmer@example.com", "hunter2") == "initial1"


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials() -> None:
	handler, _ = _login_handler(httpx.Response(403))

	with pytest.raises(AuthError) as exc_info:
		await _service(handler).login("farmer@example.com", "wrong")

	assert exc_info.value.code == "invalid_credentials"


@pytest.mark.asyncio
async def test_login_error_page_without_session() -> None:
	handler, _ = _login_handler(httpx.Response(200, text="Invalid email or password"), initial_cookie=None)

	with pytest.raises(AuthError) as exc_info:
		await _service(handler).login("farmer@example.com", "wrong")

	assert exc_info.value.code == "invalid_credentials"


@pytest.mark.asyncio
async def test_login_without_any_session() -> None:
	handler, _ = _login_handler(httpx.Response(200, text="ok"), initial_cookie=None)

	with pytest.raises(AuthError) as exc_info:
		await _service(handler).login("farmer@example.com", "hunter2")

	assert exc_info.value.code == "no_session"


@pytest.mark.asyncio
async def test_login_server_error() -> None:
	handler, _ = _login_handler(httpx.Response(500))

	with pytest.raises(AuthError) as exc_info:
		await _service(handler).login("farmer@example.com", "hunter2")

	assert exc_info.value.code == "login_failed"


@pytest.mark.asyncio
async def test_login_unreachable() -> None:
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectTimeout("timed out", request=request)

	with pytest.raises(AuthError) as exc_info:
		await _service(handler).login("farmer@example.com", "hunter2")

	assert exc_info.value.code == "login_unreachable"


@pytest.mark.asyncio
async def test_session_manager_prefers_login() -> None:
	auth = AsyncMock(spec=AuthService)
	auth.login.return_value = "logged-in"
	manager = SessionManager(
		Settings(farm_email="farmer@example.com", farm_password="hunter2", phpsessid="manual"),
		auth_service=auth,
	)

	assert await manager.acquire() == "logged-in"
	assert manager.can_relogin is True
	auth.login.assert_awaited_once_with("farmer@example.com", "hunter2")


@pytest.mark.asyncio
async def test_session_manager_falls_back_to_manual_session() -> None:
	auth = AsyncMock(spec=AuthService)
	manager = SessionManager(Settings(farm_email="", farm_password="", phpsessid="manual"), auth_service=auth)

	assert await manager.acquire() == "manual"
	assert manager.can_relogin is False
	auth.login.assert_not_awaited()
	with pytest.raises(MissingCredentialsError):
		await manager.refresh()


@pytest.mark.asyncio
async def test_session_manager_without_credentials_fails() -> None:
	manager = SessionManager(
		Settings(farm_email="", farm_password="", phpsessid=""),
		auth_service=AsyncMock(spec=AuthService),
	)

	with pytest.raises(MissingCredentialsError):
		await manager.acquire()


@pytest.mark.asyncio
async def test_session_manager_refresh_logs_in_again() -> None:
	auth = AsyncMock(spec=AuthService)
	auth.login.side_effect = ["first", "second"]
	manager = SessionManager(
		Settings(farm_email="farmer@example.com", farm_password="hunter2"),
		auth_service=auth,
	)

	await manager.acquire()
	assert await manager.refresh() == "second"
	assert manager.session_id == "second"
