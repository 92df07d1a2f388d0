"""PHPSESSID acquisition: form login and manual session fallback."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

import httpx
import structlog

from farmbot.config import Settings, get_settings
from farmbot.services.api_client import USER_AGENT, session_cookie

LOGIN_PAGE_PATH = "/index-login.php"
LOGIN_CHECK_PATH = "/login-check.php"

_SESSION_RE = re.compile(r"PHPSESSID=([^;]+)")
_logger = structlog.get_logger("farmbot.auth")


@dataclass(slots=True)
class AuthError(Exception):
	"""Structured login failure."""

	code: str
	detail: str

	def __str__(self) -> str:
		return self.detail


class MissingCredentialsError(RuntimeError):
	"""Neither FARM_EMAIL/FARM_PASSWORD nor PHPSESSID is configured."""


def extract_session_id(set_cookie_headers: Iterable[str]) -> str | None:
	for cookie in set_cookie_headers:
		match = _SESSION_RE.search(cookie)
		if match:
			return match.group(1)
	return None


class AuthService:
	def __init__(
		self,
		*,
		base_url: str | None = None,
		timeout: float | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		settings = get_settings()
		self.base_url = (base_url or settings.farm_base_url).rstrip("/")
		self.timeout = timeout or settings.request_timeout_seconds
		self.transport = transport

	async def login(self, email: str, password: str) -> str:
		"""Log in with the account form and return the authenticated PHPSESSID."""
		_logger.info("login_started")
		headers = {
			"User-Agent": USER_AGENT,
			"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
		}

		async with httpx.AsyncClient(
			base_url=self.base_url,
			timeout=self.timeout,
			follow_redirects=False,
			transport=self.transport,
		) as client:
			try:
				initial = await client.get(LOGIN_PAGE_PATH, headers=headers)
				initial_session = extract_session_id(initial.headers.get_list("set-cookie")) or ""
				if not initial_session:
					_logger.debug("login_no_initial_session")

				response = await client.post(
					LOGIN_CHECK_PATH,
					data={"email": email, "password": password},
					headers={
						**headers,
						"Content-Type": "application/x-www-form-urlencoded",
						"Origin": self.base_url,
						"Referer": f"{self.base_url}{LOGIN_PAGE_PATH}",
						"Cookie": session_cookie(initial_session),
					},
				)
			except httpx.HTTPError as exc:
				raise AuthError(code="login_unreachable", detail=f"Login request failed: {exc}") from exc

		if response.status_code in (401, 403):
			raise AuthError(code="invalid_credentials", detail="Invalid credentials. Check email and password.")
		if response.status_code >= 400:
			raise AuthError(
				code="login_failed",
				detail=f"Login returned HTTP {response.status_code}",
			)

		session_id = extract_session_id(response.headers.get_list("set-cookie"))
		if session_id:
			_logger.info("login_succeeded", session=session_id)
			return session_id

		if initial_session:
			_logger.info("login_succeeded", session=initial_session, reused_initial=True)
			return initial_session

		if "error" in response.text or "Invalid" in response.text:
			raise AuthError(code="invalid_credentials", detail="Invalid credentials. Check email and password.")
		raise AuthError(code="no_session", detail="No PHPSESSID was issued after login.")


class SessionManager:
	"""Owns the current PHPSESSID and knows how to obtain a new one."""

	def __init__(self, settings: Settings, auth_service: AuthService | None = None):
		self.settings = settings
		self.auth_service = auth_service or AuthService()
		self.session_id: str | None = None

	@property
	def can_relogin(self) -> bool:
		return self.settings.has_login_credentials

	async def acquire(self) -> str:
		"""Resolve the startup session: automatic login first, then a manual PHPSESSID."""
		if self.settings.has_login_credentials:
			self.session_id = await self.auth_service.login(
				self.settings.farm_email,
				self.settings.farm_password,
			)
		elif self.settings.phpsessid:
			_logger.info("using_manual_session")
			self.session_id = self.settings.phpsessid
		else:
			raise MissingCredentialsError(
				"No credentials configured: set FARM_EMAIL and FARM_PASSWORD, or PHPSESSID"
			)
		return self.session_id

	async def refresh(self) -> str:
		if not self.can_relogin:
			raise MissingCredentialsError("Session expired and no login credentials are configured")
		_logger.info("session_refresh")
		self.session_id = await self.auth_service.login(
			self.settings.farm_email,
			self.settings.farm_password,
		)
		return self.session_id
