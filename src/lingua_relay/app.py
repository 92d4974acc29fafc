"""
ASGI application — Socket.IO relay plus the REST history/contacts routes.

Run with `lingua-relay serve`, or `uvicorn --factory lingua_relay.app:create_app`
for the environment-configured default.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from lingua_relay import __version__
from lingua_relay.config import RelayConfig, load_config
from lingua_relay.conversations import ConversationsAPI
from lingua_relay.errors import StoreError
from lingua_relay.server import RelayServer
from lingua_relay.store.base import Store
from lingua_relay.store.memory import MemoryStore
from lingua_relay.store.supabase import SupabaseStore

logger = logging.getLogger(__name__)


class AddContactRequest(BaseModel):
    user_id: str = Field(..., min_length=1, alias="userId")
    contact_email: str = Field(..., min_length=1, alias="contactEmail")


def open_store(config: RelayConfig) -> Store:
    if config.store == "supabase":
        url, key = config.require_supabase()
        logger.info(f"Using Supabase store at {url}")
        return SupabaseStore(url, key)
    logger.info("Using in-memory store")
    return MemoryStore()


def build_api(relay: RelayServer, config: RelayConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await relay.shutdown()

    api = FastAPI(title="Lingua Relay", version=__version__, lifespan=lifespan)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins if isinstance(config.cors_origins, list) else [config.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    api.state.relay = relay
    conversations = ConversationsAPI(relay.store) if relay.store is not None else None

    def _conversations() -> ConversationsAPI:
        if conversations is None:
            raise HTTPException(status_code=500, detail="Persistence store not configured")
        return conversations

    @api.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "healthy", "version": __version__, "online": len(relay.presence)}

    @api.get("/api/presence/{user_id}")
    async def presence(user_id: str) -> dict[str, Any]:
        return {"userId": user_id, "online": user_id in relay.presence}

    @api.get("/api/messages/{user_id}/{other_id}")
    async def history(user_id: str, other_id: str) -> list[dict[str, Any]]:
        try:
            messages = await _conversations().history(user_id, other_id)
        except StoreError as e:
            logger.error(f"History {user_id}/{other_id} failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return [m.model_dump() for m in messages]

    @api.get("/api/contacts/{user_id}")
    async def contacts(user_id: str) -> list[dict[str, Any]]:
        try:
            summaries = await _conversations().contacts(user_id)
        except StoreError as e:
            logger.error(f"Contacts for {user_id} failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return [s.model_dump() for s in summaries]

    @api.post("/api/contacts")
    async def add_contact(body: AddContactRequest) -> dict[str, Any]:
        try:
            return await _conversations().add_contact(body.user_id, body.contact_email)
        except StoreError as e:
            logger.warning(f"Add contact {body.contact_email} for {body.user_id} failed: {e}")
            raise HTTPException(status_code=400, detail="Already added or error")

    return api


def create_app(config: Optional[RelayConfig] = None, store: Optional[Store] = None) -> socketio.ASGIApp:
    config = config or load_config()
    relay = RelayServer(
        store=store if store is not None else open_store(config),
        cors_origins=config.cors_origins,
        max_http_buffer_size=config.max_http_buffer_size,
    )
    return socketio.ASGIApp(relay.sio, other_asgi_app=build_api(relay, config))
