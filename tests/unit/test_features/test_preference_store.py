"""Unit tests for preference store backends."""
from __future__ import annotations

import httpx
import pytest

from notification_service.core.exceptions import TransientDependencyError
from notification_service.core.settings.preferences import PreferenceSettings
from notification_service.features.preferences.repository import PreferenceRepository
from notification_service.features.preferences.store import (
    DatabasePreferenceStore,
    HttpPreferenceStore,
    PreferenceStore,
    create_preference_store,
)


def http_store(handler) -> HttpPreferenceStore:
    return HttpPreferenceStore("http://preferences.test", transport=httpx.MockTransport(handler))


async def seed(database, user_id: str, items: list[tuple[str, bool]]) -> None:
    async with database.session() as session:
        await PreferenceRepository().replace_for_user(session, user_id, items)
        await session.commit()


@pytest.mark.unit
class TestHttpPreferenceStore:
    """Test suite for the HTTP preference backend."""

    @pytest.mark.asyncio
    async def test_parses_preference_records(self):
        seen_paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen_paths.append(request.url.path)
            return httpx.Response(200, json=[{"channel": "email", "enabled": True}, {"channel": "sms", "enabled": False}])

        async with http_store(handler) as store:
            records = await store.get_preferences("user-1")
            assert await store.is_opted_in("user-1", "email")
            assert not await store.is_opted_in("user-1", "sms")

        assert [(r.channel, r.enabled) for r in records] == [("email", True), ("sms", False)]
        assert seen_paths[0] == "/v1/users/user-1/preferences"

    @pytest.mark.asyncio
    async def test_user_id_is_encoded_as_one_path_segment(self):
        raw_paths: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            raw_paths.append(request.url.raw_path)
            return httpx.Response(200, json=[{"channel": "email", "enabled": True}])

        async with http_store(handler) as store:
            await store.is_opted_in("bob/preferences#", "email")

        assert raw_paths == [b"/v1/users/bob%2Fpreferences%23/preferences"]

    @pytest.mark.asyncio
    async def test_channel_match_is_exact(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"channel": "EMAIL", "enabled": True}, {"channel": "e-mail", "enabled": True}])

        async with http_store(handler) as store:
            assert not await store.is_opted_in("user-1", "email")

    @pytest.mark.asyncio
    async def test_unknown_user_has_no_preferences(self):
        async with http_store(lambda request: httpx.Response(404)) as store:
            assert await store.get_preferences("nobody") == []
            assert not await store.is_opted_in("nobody", "email")

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        async with http_store(lambda request: httpx.Response(503)) as store:
            with pytest.raises(TransientDependencyError, match="503"):
                await store.is_opted_in("user-1", "email")

    @pytest.mark.asyncio
    async def test_connection_failure_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with http_store(handler) as store:
            with pytest.raises(TransientDependencyError) as exc_info:
                await store.is_opted_in("user-1", "email")

        assert exc_info.value.dependency == "preference_service"

    @pytest.mark.asyncio
    async def test_invalid_body_is_transient(self):
        async with http_store(lambda request: httpx.Response(200, json={"channel": "email"})) as store:
            with pytest.raises(TransientDependencyError, match="invalid response body"):
                await store.get_preferences("user-1")


@pytest.mark.unit
class TestDatabasePreferenceStore:
    """Test suite for the database preference backend."""

    @pytest.mark.asyncio
    async def test_enabled_row_opts_in(self, database):
        await seed(database, "user-1", [("email", True), ("sms", False)])
        store = DatabasePreferenceStore(database)

        assert await store.is_opted_in("user-1", "email")
        assert not await store.is_opted_in("user-1", "sms")
        assert not await store.is_opted_in("user-1", "whatsapp")
        assert not await store.is_opted_in("user-2", "email")

    @pytest.mark.asyncio
    async def test_lists_records_for_user(self, database):
        await seed(database, "user-1", [("sms", True), ("email", False)])
        store = DatabasePreferenceStore(database)

        records = await store.get_preferences("user-1")

        assert {(r.channel, r.enabled) for r in records} == {("email", False), ("sms", True)}
        assert await store.get_preferences("user-2") == []

    @pytest.mark.asyncio
    async def test_replace_discards_previous_rows(self, database):
        await seed(database, "user-1", [("email", True), ("sms", True)])
        await seed(database, "user-1", [("whatsapp", True)])
        store = DatabasePreferenceStore(database)

        records = await store.get_preferences("user-1")

        assert [(r.channel, r.enabled) for r in records] == [("whatsapp", True)]

    @pytest.mark.asyncio
    async def test_database_failure_is_transient(self, database):
        store = DatabasePreferenceStore(database)

        class FailingRepository(PreferenceRepository):
            async def is_enabled(self, session, user_id, channel):
                raise OSError("connection reset")

        store.repository = FailingRepository()

        with pytest.raises(TransientDependencyError):
            await store.is_opted_in("user-1", "email")


@pytest.mark.unit
class TestCreatePreferenceStore:
    """Test suite for backend selection."""

    @pytest.mark.asyncio
    async def test_database_backend_is_default(self, database):
        store = create_preference_store(PreferenceSettings(), database)

        assert isinstance(store, DatabasePreferenceStore)
        assert isinstance(store, PreferenceStore)

    @pytest.mark.asyncio
    async def test_http_backend(self, database):
        store = create_preference_store(
            PreferenceSettings(backend="http", service_url="http://preferences:8081"),
            database,
        )

        assert isinstance(store, HttpPreferenceStore)
        assert store.base_url == "http://preferences:8081"
        await store.close()
