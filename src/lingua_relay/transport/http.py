"""
REST HTTP client — shared by the Supabase store and the CLI.
"""

from typing import Any, Optional

import httpx

from lingua_relay.errors import RelayError


class HttpClient:
    def __init__(
        self,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "User-Agent": "lingua-relay/0.1.0",
                "Accept": "application/json",
                **(headers or {}),
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _check(resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            raise RelayError("http_error", f"HTTP {resp.status_code}: {resp.text[:200]}",
                             details={"status": resp.status_code})
        if not resp.content:
            return None
        return resp.json()

    async def get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        return self._check(await self._client.get(path, params=params))

    async def post(self, path: str, body: Any = None, params: Optional[dict[str, str]] = None,
                   headers: Optional[dict[str, str]] = None) -> Any:
        return self._check(await self._client.post(path, json=body, params=params, headers=headers))

    async def patch(self, path: str, body: Any = None, params: Optional[dict[str, str]] = None,
                    headers: Optional[dict[str, str]] = None) -> Any:
        return self._check(await self._client.patch(path, json=body, params=params, headers=headers))

    async def close(self) -> None:
        await self._client.aclose()
