"""
HTTP client session for the OfficeFood API.

Holds the caller's credentials explicitly instead of in a global token store.
A 401 triggers one refresh and one retry; a failed refresh clears the
credentials and raises SessionExpiredError so the caller restarts the OTP login.
"""

from typing import Any, Dict, Optional

import httpx

from officefood.logging.utils import get_app_logger

logger = get_app_logger(__name__)


class SessionExpiredError(Exception):
    """Both credentials were rejected; a new OTP login is required."""


class ApiSession:
    def __init__(self, base_url: str, access_token: Optional[str] = None, refresh_token: Optional[str] = None,
                 client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user: Optional[Dict[str, Any]] = None
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(extra or {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None

    def send_otp(self, phone: str) -> Dict[str, Any]:
        response = self._client.post("/auth/send-otp", json={"phone": phone})
        response.raise_for_status()
        return response.json()

    def login(self, phone: str, code: str) -> Dict[str, Any]:
        response = self._client.post("/auth/verify-otp", json={"phone": phone, "code": code})
        response.raise_for_status()
        data = response.json()
        self.access_token = data["accessToken"]
        self.refresh_token = data["refreshToken"]
        self.user = data.get("user")
        logger.info(f"client_login | user_id={(self.user or {}).get('id')}")
        return data

    def refresh(self) -> bool:
        if not self.refresh_token:
            return False
        response = self._client.post("/auth/refresh", json={"refreshToken": self.refresh_token})
        if response.status_code != httpx.codes.OK:
            logger.warning(f"client_refresh_failed | status_code={response.status_code}")
            return False
        data = response.json()
        self.access_token = data["accessToken"]
        self.refresh_token = data["refreshToken"]
        return True

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send an authenticated request.

        Raises:
            SessionExpiredError: the access token was rejected and refresh failed
        """
        headers = kwargs.pop("headers", None)
        response = self._client.request(method, path, headers=self._headers(headers), **kwargs)
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        if not self.refresh():
            self.clear()
            raise SessionExpiredError("Session expired, please log in again")

        response = self._client.request(method, path, headers=self._headers(headers), **kwargs)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            self.clear()
            raise SessionExpiredError("Session expired, please log in again")
        return response

    def get(self, path: str, **kwargs) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> httpx.Response:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def logout(self) -> None:
        if self.access_token:
            self._client.post("/auth/logout", headers=self._headers())
        self.clear()
