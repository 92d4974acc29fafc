"""
Async REST client for a running relay.
"""

from typing import Any, Optional

import httpx

from lingua_relay.transport.http import HttpClient

DEFAULT_BASE_URL = "http://127.0.0.1:3000"


class RelayClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.http = HttpClient(base_url, transport=transport)

    async def health(self) -> dict[str, Any]:
        return await self.http.get("/health")

    async def presence(self, user_id: str) -> dict[str, Any]:
        return await self.http.get(f"/api/presence/{user_id}")

    async def history(self, user_id: str, other_id: str) -> list[dict[str, Any]]:
        """Messages between the pair, oldest first. Marks `other_id`'s messages read."""
        return await self.http.get(f"/api/messages/{user_id}/{other_id}")

    async def contacts(self, user_id: str) -> list[dict[str, Any]]:
        return await self.http.get(f"/api/contacts/{user_id}")

    async def add_contact(self, user_id: str, contact_email: str) -> dict[str, Any]:
        return await self.http.post("/api/contacts", {"userId": user_id, "contactEmail": contact_email})

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
