import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A non-2xx answer from the CRM API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """Thin async wrapper over the CRM HTTP API that carries the bearer token."""

    def __init__(self, base_url: str = "http://localhost:8000", token: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _error_message(response: httpx.Response, fallback: Optional[str]) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        if fallback:
            return f"{fallback} ({response.status_code})"
        return f"Request failed ({response.status_code})"

    async def request(self, method: str, path: str, *, json: Any = None,
                      params: Optional[Dict[str, Any]] = None, fallback_error: Optional[str] = None) -> Any:
        response = await self._client.request(method, path, json=json, params=params, headers=self._headers())
        if response.is_error:
            message = self._error_message(response, fallback_error)
            logger.debug(f"{method} {path} failed: {message}")
            raise ApiError(message, response.status_code)
        return response.json()

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self):
        await self._client.aclose()
