"""Connection lifecycle: Unregistered → Registered → Closed."""

import pytest

from conftest import FailingStore
from lingua_relay.errors import RegistrationError
from lingua_relay.lifecycle import ConnectionLifecycleManager
from lingua_relay.models.events import S2CEvent
from lingua_relay.models.records import UserRecord
from lingua_relay.presence import ConnectionState, PresenceRegistry
from lingua_relay.relay import MessageRelay
from lingua_relay.tasks import BackgroundTasks


def make_manager(emitter, store=None):
    presence = PresenceRegistry()
    tasks = BackgroundTasks()
    manager = ConnectionLifecycleManager(presence, emitter, store, tasks, clock=lambda: 1_700_000_000_000)
    return manager, presence, tasks


class TestRegister:

    @pytest.mark.asyncio
    async def test_connect_starts_unregistered(self, emitter):
        manager, presence, _ = make_manager(emitter)
        handle = manager.connect("s1")
        assert handle.state is ConnectionState.UNREGISTERED
        assert handle.identity is None
        assert len(presence) == 0

    @pytest.mark.asyncio
    async def test_register_broadcasts_online(self, emitter):
        manager, presence, _ = make_manager(emitter)
        manager.connect("s1")
        handle = await manager.register("s1", "alice")

        assert handle.state is ConnectionState.REGISTERED
        assert presence.resolve("alice") is handle
        assert emitter.broadcasts(S2CEvent.USER_STATUS) == [{"userId": "alice", "status": "online"}]

    @pytest.mark.asyncio
    async def test_same_identity_again_is_noop(self, emitter):
        manager, _, _ = make_manager(emitter)
        manager.connect("s1")
        await manager.register("s1", "alice")
        await manager.register("s1", "alice")
        assert len(emitter.broadcasts(S2CEvent.USER_STATUS)) == 1

    @pytest.mark.asyncio
    async def test_different_identity_on_registered_connection_rejected(self, emitter):
        manager, presence, _ = make_manager(emitter)
        manager.connect("s1")
        await manager.register("s1", "alice")

        with pytest.raises(RegistrationError) as exc:
            await manager.register("s1", "mallory")
        assert exc.value.code == "identity_conflict"
        assert presence.resolve("mallory") is None
        assert presence.resolve("alice").sid == "s1"

    @pytest.mark.asyncio
    async def test_register_unknown_connection_rejected(self, emitter):
        manager, _, _ = make_manager(emitter)
        with pytest.raises(RegistrationError):
            await manager.register("ghost", "alice")
        assert emitter.sent == []

    @pytest.mark.asyncio
    async def test_register_empty_identity_rejected(self, emitter):
        manager, _, _ = make_manager(emitter)
        manager.connect("s1")
        with pytest.raises(RegistrationError):
            await manager.register("s1", "")
        assert manager.get("s1").state is ConnectionState.UNREGISTERED


class TestDisconnect:

    @pytest.mark.asyncio
    async def test_disconnect_broadcasts_offline_once(self, emitter, store):
        await store.save_user(UserRecord(id="alice", email="a@example.com"))
        manager, presence, tasks = make_manager(emitter, store)
        manager.connect("s1")
        manager.connect("s2")
        await manager.register("s1", "alice")
        emitter.clear()

        await manager.disconnect("s1")
        await tasks.drain()

        assert emitter.broadcasts(S2CEvent.USER_STATUS) == [
            {"userId": "alice", "status": "offline", "lastSeen": 1_700_000_000_000},
        ]
        assert presence.resolve("alice") is None
        assert (await store.get_user("alice")).last_seen == 1_700_000_000_000
        assert manager.get("s1") is None
        assert manager.connection_count == 1

    @pytest.mark.asyncio
    async def test_unregistered_disconnect_is_silent(self, emitter):
        manager, _, _ = make_manager(emitter)
        manager.connect("s1")
        await manager.disconnect("s1")
        assert emitter.sent == []

    @pytest.mark.asyncio
    async def test_unknown_disconnect_is_silent(self, emitter):
        manager, _, _ = make_manager(emitter)
        await manager.disconnect("never-connected")
        assert emitter.sent == []

    @pytest.mark.asyncio
    async def test_stale_disconnect_keeps_fresher_registration(self, emitter, store):
        manager, presence, tasks = make_manager(emitter, store)
        manager.connect("s1")
        manager.connect("s2")
        await manager.register("s1", "alice")
        await manager.register("s2", "alice")
        emitter.clear()

        await manager.disconnect("s1")
        await tasks.drain()

        assert presence.resolve("alice").sid == "s2"
        assert emitter.broadcasts() == []

    @pytest.mark.asyncio
    async def test_closed_connection_cannot_register(self, emitter):
        manager, _, _ = make_manager(emitter)
        handle = manager.connect("s1")
        await manager.disconnect("s1")
        assert handle.state is ConnectionState.CLOSED
        with pytest.raises(RegistrationError):
            await manager.register("s1", "alice")

    @pytest.mark.asyncio
    async def test_last_seen_failure_does_not_block_broadcast(self, emitter):
        manager, presence, tasks = make_manager(emitter, FailingStore())
        manager.connect("s1")
        await manager.register("s1", "alice")
        emitter.clear()

        await manager.disconnect("s1")
        await tasks.drain()

        assert [d["status"] for d in emitter.broadcasts(S2CEvent.USER_STATUS)] == ["offline"]
        assert presence.resolve("alice") is None


class TestReclaim:

    @pytest.mark.asyncio
    async def test_older_connection_reclaims_after_newer_leaves(self, emitter):
        manager, presence, tasks = make_manager(emitter)
        manager.connect("s1")
        manager.connect("s2")
        await manager.register("s1", "alice")
        await manager.register("s2", "alice")
        await manager.disconnect("s2")
        assert presence.resolve("alice") is None
        emitter.clear()

        handle = await manager.register("s1", "alice")

        assert presence.resolve("alice") is handle
        assert emitter.broadcasts(S2CEvent.USER_STATUS) == [{"userId": "alice", "status": "online"}]

        relay = MessageRelay(presence, emitter, tasks=tasks)
        await relay.send_direct_message("bob", "alice", text="back?")
        assert len(emitter.received("s1", S2CEvent.RECEIVE_PRIVATE_MESSAGE)) == 1

    @pytest.mark.asyncio
    async def test_older_connection_reclaims_from_live_newer_one(self, emitter):
        manager, presence, _ = make_manager(emitter)
        manager.connect("s1")
        manager.connect("s2")
        await manager.register("s1", "alice")
        await manager.register("s2", "alice")

        await manager.register("s1", "alice")

        assert presence.resolve("alice").sid == "s1"
        await manager.disconnect("s2")
        assert presence.resolve("alice").sid == "s1"
