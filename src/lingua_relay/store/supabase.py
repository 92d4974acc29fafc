"""
Supabase store over PostgREST (httpx).

Column names match the record field names. `is_read` is written as 1 on the
messages table.
"""

from typing import Any, Awaitable, Optional, TypeVar

import httpx

from lingua_relay.errors import RelayError, StoreError
from lingua_relay.models.records import Message, UserRecord
from lingua_relay.store.base import Store
from lingua_relay.transport.http import HttpClient

T = TypeVar("T")

REST_PATH = "/rest/v1"
RETURN_REPRESENTATION = {"Prefer": "return=representation"}
UPSERT = {"Prefer": "resolution=merge-duplicates,return=representation"}


def _pair_filter(user_id: str, other_id: str) -> str:
    return (
        f"(and(sender_id.eq.{user_id},receiver_id.eq.{other_id}),"
        f"and(sender_id.eq.{other_id},receiver_id.eq.{user_id}))"
    )


def _in_list(values: list[str]) -> str:
    quoted = ",".join('"' + v.replace('"', '\\"') + '"' for v in values)
    return f"in.({quoted})"


class SupabaseStore(Store):
    def __init__(self, url: str, key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http = HttpClient(
            f"{url.rstrip('/')}{REST_PATH}",
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            transport=transport,
        )

    async def _call(self, what: str, op: Awaitable[T]) -> T:
        try:
            return await op
        except RelayError as e:
            status = (e.details or {}).get("status")
            code = "duplicate" if status == 409 else "store_error"
            raise StoreError(f"{what} failed: {e}", code=code, details=e.details) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{what} failed: {e}", code="store_unavailable") from e

    async def _select_one(self, table: str, params: dict[str, str]) -> Optional[dict[str, Any]]:
        rows = await self._call(f"select {table}", self._http.get(f"/{table}", params={"select": "*", **params}))
        return rows[0] if rows else None

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        row = await self._select_one("users", {"id": f"eq.{user_id}"})
        return UserRecord.model_validate(row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        row = await self._select_one("users", {"email": f"eq.{email}"})
        return UserRecord.model_validate(row) if row else None

    async def save_user(self, user: UserRecord) -> UserRecord:
        rows = await self._call("upsert user", self._http.post(
            "/users", [user.model_dump(exclude_none=True)], headers=UPSERT,
        ))
        return UserRecord.model_validate(rows[0]) if rows else user

    async def update_last_seen(self, user_id: str, last_seen: int) -> None:
        await self._call("update last_seen", self._http.patch(
            "/users", {"last_seen": last_seen}, params={"id": f"eq.{user_id}"},
        ))

    async def add_contact(self, user_id: str, contact_email: str) -> None:
        await self._call("insert contact", self._http.post(
            "/contacts", [{"user_id": user_id, "contact_email": contact_email}],
        ))

    async def list_contacts(self, user_id: str) -> list[UserRecord]:
        rows = await self._call("select contacts", self._http.get(
            "/contacts", params={"select": "contact_email", "user_id": f"eq.{user_id}"},
        ))
        emails = [r["contact_email"] for r in rows or []]
        if not emails:
            return []
        users = await self._call("select users", self._http.get(
            "/users", params={"select": "*", "email": _in_list(emails)},
        ))
        return [UserRecord.model_validate(u) for u in users or []]

    async def insert_message(self, message: Message) -> None:
        row = message.model_dump(exclude={"is_read"})
        await self._call("insert message", self._http.post("/messages", [row]))

    async def conversation(self, user_id: str, other_id: str) -> list[Message]:
        rows = await self._call("select messages", self._http.get("/messages", params={
            "select": "*",
            "or": _pair_filter(user_id, other_id),
            "order": "timestamp.asc",
        }))
        return [Message.model_validate(r) for r in rows or []]

    async def last_message(self, user_id: str, other_id: str) -> Optional[Message]:
        rows = await self._call("select last message", self._http.get("/messages", params={
            "select": "*",
            "or": _pair_filter(user_id, other_id),
            "order": "timestamp.desc",
            "limit": "1",
        }))
        return Message.model_validate(rows[0]) if rows else None

    async def mark_read(self, reader_id: str, sender_id: str) -> int:
        rows = await self._call("mark read", self._http.patch(
            "/messages",
            {"is_read": 1},
            params={"sender_id": f"eq.{sender_id}", "receiver_id": f"eq.{reader_id}"},
            headers=RETURN_REPRESENTATION,
        ))
        return len(rows or [])

    async def close(self) -> None:
        await self._http.close()
