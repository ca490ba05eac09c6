"""
SongCatalog Backend: HTTP Route Tests
======================================

What:  End-to-end request/response tests for every endpoint.
How:   The app's service dependency is replaced by a SongService around the
       in-memory fake (see conftest.test_client), so no database is needed.

What we test:
    ✅ Wire shapes for each endpoint (releaseDate, {data, page, ...}, etc.)
    ✅ 400 for bad bodies, missing query params, out-of-range pagination
    ✅ 400 is returned before the repository is called
    ✅ 404 for missing songs, 500 for storage failures
    ✅ X-Request-ID on responses and in error bodies, unexpected 500s included
    ✅ Ids and pages beyond the database range give 404 and an empty page
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from songcatalog.exceptions import StorageError, ValidationError
from songcatalog.repositories.base import SongRepository
from songcatalog.repositories.song_repository import SqlSongRepository
from songcatalog.services.song_service import SongService


async def create(client, data, **overrides):
    response = await client.post("/songs", json={**data, **overrides})
    assert response.status_code == 200
    return response.json()


class TestCreateSong:

    @pytest.mark.asyncio
    async def test_create_returns_record_with_id(self, test_client, sample_song_data):
        response = await test_client.post("/songs", json=sample_song_data)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 1
        assert body["group"] == "Muse"
        assert body["song"] == "Supermassive Black Hole"
        assert body["releaseDate"] == "16.07.2006"

    @pytest.mark.asyncio
    async def test_create_accepts_snake_case_release_date(self, test_client, sample_song_data):
        data = dict(sample_song_data)
        data["release_date"] = data.pop("releaseDate")

        response = await test_client.post("/songs", json=data)

        assert response.status_code == 200
        assert response.json()["releaseDate"] == "16.07.2006"

    @pytest.mark.asyncio
    async def test_create_missing_field_is_400(self, test_client, fake_repository, sample_song_data):
        data = dict(sample_song_data)
        del data["link"]

        response = await test_client.post("/songs", json=data)

        assert response.status_code == 400
        assert "link" in response.json()["error"]
        assert fake_repository.calls == 0

    @pytest.mark.asyncio
    async def test_create_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/songs", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert "error" in response.json()


class TestListSongs:

    @pytest.mark.asyncio
    async def test_list_shape_and_totals(self, test_client, sample_song_data):
        for name in ["A", "B", "C"]:
            await create(test_client, sample_song_data, song=name)

        response = await test_client.get("/songs", params={"page": 1, "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["total_items"] == 3
        assert body["total_pages"] == 2
        assert [s["song"] for s in body["data"]] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_list_filters_by_text_substring(self, test_client, sample_song_data):
        await create(test_client, sample_song_data, song="A", text="Hello darkness")
        await create(test_client, sample_song_data, song="B", text="Goodbye")

        response = await test_client.get("/songs", params={"text": "DARK"})

        body = response.json()
        assert body["total_items"] == 1
        assert body["data"][0]["song"] == "A"

    @pytest.mark.asyncio
    async def test_list_empty_catalog(self, test_client):
        response = await test_client.get("/songs")

        assert response.status_code == 200
        assert response.json() == {"data": [], "page": 1, "total_pages": 0, "total_items": 0}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params", [{"limit": 0}, {"limit": 101}, {"page": 0}, {"page": "abc"}]
    )
    async def test_bad_pagination_is_400_before_storage(self, test_client, fake_repository, params):
        response = await test_client.get("/songs", params=params)

        assert response.status_code == 400
        assert "error" in response.json()
        assert fake_repository.calls == 0


class TestSongText:

    @pytest.mark.asyncio
    async def test_text_pages(self, test_client, sample_song_data):
        song = await create(test_client, sample_song_data, text="verse one\nverse two\nverse three")

        first = await test_client.get(f"/songs/{song['id']}/text", params={"page": 1, "limit": 2})
        second = await test_client.get(f"/songs/{song['id']}/text", params={"page": 2, "limit": 2})
        third = await test_client.get(f"/songs/{song['id']}/text", params={"page": 3, "limit": 2})

        assert first.json() == {"song": "Supermassive Black Hole", "verses": ["verse one", "verse two"]}
        assert second.json()["verses"] == ["verse three"]
        assert third.status_code == 200
        assert third.json()["verses"] == []

    @pytest.mark.asyncio
    async def test_text_default_limit_is_two(self, test_client, sample_song_data):
        song = await create(test_client, sample_song_data)

        response = await test_client.get(f"/songs/{song['id']}/text")

        assert len(response.json()["verses"]) == 2

    @pytest.mark.asyncio
    async def test_text_missing_song_is_404(self, test_client):
        response = await test_client.get("/songs/999/text")

        assert response.status_code == 404
        assert "999" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_text_non_numeric_id_is_400(self, test_client):
        response = await test_client.get("/songs/abc/text")

        assert response.status_code == 400


class TestGetSongById:

    @pytest.mark.asyncio
    async def test_get_existing(self, test_client, sample_song_data):
        song = await create(test_client, sample_song_data)

        response = await test_client.get(f"/songs/{song['id']}")

        assert response.status_code == 200
        assert response.json() == song

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, test_client):
        response = await test_client.get("/songs/7")

        assert response.status_code == 404


class TestUpdateSong:

    @pytest.mark.asyncio
    async def test_patch_changes_only_first_populated_field(self, test_client, sample_song_data):
        await create(test_client, sample_song_data)

        response = await test_client.patch(
            "/songs",
            params={"group": "Muse", "song_name": "Supermassive Black Hole"},
            json={"song": "Uprising", "link": "https://ignored.example"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["song"] == "Uprising"
        assert body["link"] == sample_song_data["link"]

    @pytest.mark.asyncio
    async def test_patch_missing_song_is_404(self, test_client):
        response = await test_client.patch(
            "/songs", params={"group": "Nobody", "song_name": "Nothing"}, json={"text": "x"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_without_query_params_is_400(self, test_client, fake_repository):
        response = await test_client.patch("/songs", json={"text": "x"})

        assert response.status_code == 400
        assert fake_repository.calls == 0


class TestDeleteSong:

    @pytest.mark.asyncio
    async def test_delete_returns_message_title_and_id(self, test_client, sample_song_data):
        song = await create(test_client, sample_song_data)

        response = await test_client.delete(
            "/songs", params={"group": "Muse", "song_name": "Supermassive Black Hole"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "song deleted",
            "song": "Supermassive Black Hole",
            "id": song["id"],
        }
        assert (await test_client.get(f"/songs/{song['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_is_404(self, test_client):
        response = await test_client.delete("/songs", params={"group": "A", "song_name": "B"})

        assert response.status_code == 404


class TestSongInfo:

    @pytest.mark.asyncio
    async def test_info_returns_record_without_id(self, test_client, sample_song_data):
        await create(test_client, sample_song_data)

        response = await test_client.get(
            "/info", params={"group": "Muse", "song": "Supermassive Black Hole"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "song": "Supermassive Black Hole",
            "group": "Muse",
            "releaseDate": "16.07.2006",
            "text": sample_song_data["text"],
            "link": sample_song_data["link"],
        }

    @pytest.mark.asyncio
    async def test_info_unknown_pair_is_404(self, test_client):
        response = await test_client.get("/info", params={"group": "Muse", "song": "Unknown"})

        assert response.status_code == 404
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_info_empty_param_is_400(self, test_client, fake_repository):
        response = await test_client.get("/info", params={"group": "", "song": "x"})

        assert response.status_code == 400
        assert fake_repository.calls == 0


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_storage_failure_is_500_with_message(self, test_client):
        from songcatalog.main import app
        from songcatalog.routes.songs import get_song_service

        repository = AsyncMock(spec=SongRepository)
        repository.get_by_id.side_effect = StorageError("get_by_id", RuntimeError("connection refused"))
        app.dependency_overrides[get_song_service] = lambda: SongService(repository)

        response = await test_client.get("/songs/1")

        assert response.status_code == 500
        assert "connection refused" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/songs/1", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, test_client):
        response = await test_client.get("/nope")

        assert response.status_code == 404
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_service_validation_error_is_400(self, test_client):
        from songcatalog.main import app
        from songcatalog.routes.songs import get_song_service

        service = MagicMock()
        service.get_text_page = AsyncMock(
            side_effect=ValidationError("page must be at least 1", field="page")
        )
        app.dependency_overrides[get_song_service] = lambda: service

        response = await test_client.get("/songs/1/text", headers={"X-Request-ID": "val-1"})

        assert response.status_code == 400
        assert response.json() == {"error": "page must be at least 1", "request_id": "val-1"}

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self):
        from songcatalog.main import app
        from songcatalog.routes.songs import get_song_service

        service = MagicMock()
        service.get_song = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_song_service] = lambda: service
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/songs/1", headers={"X-Request-ID": "req-500"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "an unexpected error occurred", "request_id": "req-500"}
        assert response.headers["X-Request-ID"] == "req-500"


@pytest_asyncio.fixture
async def sql_client(db_session):
    """Client whose service runs on the real SQL repository (in-memory SQLite)."""
    from songcatalog.main import app
    from songcatalog.routes.songs import get_song_service

    app.dependency_overrides[get_song_service] = lambda: SongService(SqlSongRepository(db_session))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class TestOversizedNumbers:
    """Ids and pages larger than the database can store, over real SQL."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/songs/3000000000", "/songs/3000000000/text"])
    async def test_huge_id_is_404(self, sql_client, path):
        response = await sql_client.get(path)

        assert response.status_code == 404
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_huge_page_is_empty(self, sql_client, sample_song_data):
        await create(sql_client, sample_song_data)

        response = await sql_client.get("/songs", params={"page": 10**17, "limit": 100})

        assert response.status_code == 200
        assert response.json() == {
            "data": [],
            "page": 10**17,
            "total_pages": 1,
            "total_items": 1,
        }
