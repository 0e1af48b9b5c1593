"""Tests for deck API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from riftforge.db.database import get_session
from riftforge.main import app
from riftforge.models.db import Base
from riftforge.services.card_catalog import CardCatalog, get_card_catalog

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(async_engine, catalog: CardCatalog):
    """Provide an async test client with overridden database session and catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_card_catalog] = lambda: catalog

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def deck_id(client: AsyncClient) -> str:
    response = await client.post("/decks", json={"name": "Jinx Aggro"}, headers=USER)
    return response.json()["id"]


async def _complete(client: AsyncClient, deck_id: str) -> dict:
    """Build a full legal deck through the API."""
    await client.put(f"/decks/{deck_id}/legend", json={"cardId": "leg-jinx"}, headers=USER)
    await client.put(f"/decks/{deck_id}/champion", json={"cardId": "champ-jinx"}, headers=USER)
    for position in (1, 2, 3):
        await client.put(
            f"/decks/{deck_id}/battlefields/{position}",
            json={"cardId": f"bf-{position}"},
            headers=USER,
        )
    for i in range(1, 14):
        await client.post(
            f"/decks/{deck_id}/main", json={"cardId": f"unit-{i:02d}", "quantity": 3}, headers=USER
        )
    await client.post(f"/decks/{deck_id}/main", json={"cardId": "unit-14"}, headers=USER)
    response = None
    for i in range(1, 13):
        response = await client.post(
            f"/decks/{deck_id}/rune", json={"cardId": f"rune-{i:02d}"}, headers=USER
        )
    assert response is not None
    return response.json()


class TestDeckCrud:
    async def test_create_deck(self, client: AsyncClient) -> None:
        """New decks start empty at the legend step."""
        response = await client.post("/decks", json={"name": "  Jinx Aggro "}, headers=USER)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Jinx Aggro"
        assert data["userId"] == "user-1"
        assert data["legendCardId"] is None
        assert data["battlefields"] == [
            {"position": 1, "cardId": None},
            {"position": 2, "cardId": None},
            {"position": 3, "cardId": None},
        ]
        assert data["mainCount"] == 0
        assert data["nextStep"] == {"step": "legend", "position": None}
        assert data["version"] == 0

    async def test_create_without_body_uses_default_name(self, client: AsyncClient) -> None:
        response = await client.post("/decks", headers=USER)

        assert response.status_code == 201
        assert response.json()["name"] == "New Deck"

    async def test_missing_user_header(self, client: AsyncClient) -> None:
        response = await client.get("/decks")

        assert response.status_code == 401
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_list_only_own_decks(self, client: AsyncClient, deck_id: str) -> None:
        await client.post("/decks", json={"name": "Other"}, headers=OTHER_USER)

        response = await client.get("/decks", headers=USER)

        data = response.json()
        assert data["count"] == 1
        assert data["decks"][0]["id"] == deck_id

    async def test_get_deck(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.get(f"/decks/{deck_id}", headers=USER)

        assert response.status_code == 200
        assert response.json()["validation"] is None

    async def test_other_users_deck_is_not_found(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.get(f"/decks/{deck_id}", headers=OTHER_USER)

        assert response.status_code == 404
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "not_found"

    async def test_rename(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.patch(f"/decks/{deck_id}", json={"name": " Burn "}, headers=USER)

        assert response.status_code == 200
        assert response.json()["name"] == "Burn"
        assert response.json()["version"] == 1

    async def test_rename_blank_rejected(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.patch(f"/decks/{deck_id}", json={"name": "   "}, headers=USER)

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_delete(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.delete(f"/decks/{deck_id}", headers=USER)

        assert response.status_code == 200
        assert response.json() == {"deckId": deck_id, "deleted": True}
        assert (await client.get(f"/decks/{deck_id}", headers=USER)).status_code == 404

    async def test_delete_missing(self, client: AsyncClient) -> None:
        response = await client.delete("/decks/missing", headers=USER)

        assert response.status_code == 404


class TestLeadersAndBattlefields:
    async def test_set_legend_and_champion(self, client: AsyncClient, deck_id: str) -> None:
        await client.put(f"/decks/{deck_id}/legend", json={"cardId": "leg-jinx"}, headers=USER)
        response = await client.put(
            f"/decks/{deck_id}/champion", json={"cardId": "champ-jinx"}, headers=USER
        )

        data = response.json()
        assert data["legendCardId"] == "leg-jinx"
        assert data["championCardId"] == "champ-jinx"
        assert data["nextStep"] == {"step": "battlefield", "position": 1}

    async def test_champion_before_legend(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.put(
            f"/decks/{deck_id}/champion", json={"cardId": "champ-jinx"}, headers=USER
        )

        assert response.status_code == 409
        data = response.json()
        assert data["outcome"] == "refusal"
        assert data["failure"]["kind"] == "missing_prerequisite"
        assert data["failure"]["suggestion"]

    async def test_incompatible_champion(self, client: AsyncClient, deck_id: str) -> None:
        await client.put(f"/decks/{deck_id}/legend", json={"cardId": "leg-jinx"}, headers=USER)

        response = await client.put(
            f"/decks/{deck_id}/champion", json={"cardId": "champ-garen"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "incompatible_champion"
        deck = (await client.get(f"/decks/{deck_id}", headers=USER)).json()
        assert deck["championCardId"] is None

    async def test_legend_change_clears_champion(self, client: AsyncClient, deck_id: str) -> None:
        await client.put(f"/decks/{deck_id}/legend", json={"cardId": "leg-jinx"}, headers=USER)
        await client.put(f"/decks/{deck_id}/champion", json={"cardId": "champ-jinx"}, headers=USER)

        response = await client.put(
            f"/decks/{deck_id}/legend", json={"cardId": "leg-garen"}, headers=USER
        )

        assert response.json()["championCardId"] is None

    async def test_unknown_card(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.put(
            f"/decks/{deck_id}/legend", json={"cardId": "nope"}, headers=USER
        )

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "card_not_found"

    async def test_wrong_card_type(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.put(
            f"/decks/{deck_id}/legend", json={"cardId": "unit-01"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_card_type"

    async def test_set_and_clear_battlefield(self, client: AsyncClient, deck_id: str) -> None:
        set_response = await client.put(
            f"/decks/{deck_id}/battlefields/2", json={"cardId": "bf-2"}, headers=USER
        )
        clear_response = await client.put(
            f"/decks/{deck_id}/battlefields/2", json={"cardId": None}, headers=USER
        )

        assert set_response.json()["battlefields"][1] == {"position": 2, "cardId": "bf-2"}
        assert set_response.json()["battlefieldCount"] == 1
        assert clear_response.json()["battlefieldCount"] == 0

    async def test_invalid_position(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.put(
            f"/decks/{deck_id}/battlefields/4", json={"cardId": "bf-1"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_position"

    async def test_invalid_position_checked_before_card(
        self, client: AsyncClient, deck_id: str
    ) -> None:
        response = await client.put(
            f"/decks/{deck_id}/battlefields/7", json={"cardId": "nope"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_position"

    async def test_non_numeric_position(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.put(
            f"/decks/{deck_id}/battlefields/abc", json={"cardId": "bf-1"}, headers=USER
        )

        assert response.status_code == 422
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "invalid_input"
        assert "position" in data["failure"]["detail"]


class TestSections:
    async def test_add_and_set_quantity(self, client: AsyncClient, deck_id: str) -> None:
        await client.post(f"/decks/{deck_id}/main", json={"cardId": "unit-01"}, headers=USER)
        response = await client.patch(
            f"/decks/{deck_id}/main/unit-01", json={"quantity": 3}, headers=USER
        )

        data = response.json()
        assert data["mainItems"] == [{"cardId": "unit-01", "quantity": 3}]
        assert data["mainCount"] == 3

    async def test_copy_limit(self, client: AsyncClient, deck_id: str) -> None:
        await client.post(
            f"/decks/{deck_id}/main", json={"cardId": "unit-01", "quantity": 3}, headers=USER
        )

        response = await client.post(
            f"/decks/{deck_id}/main", json={"cardId": "unit-01"}, headers=USER
        )

        assert response.status_code == 409
        assert response.json()["failure"]["kind"] == "copy_limit_exceeded"
        deck = (await client.get(f"/decks/{deck_id}", headers=USER)).json()
        assert deck["mainItems"] == [{"cardId": "unit-01", "quantity": 3}]

    async def test_rune_quantity_over_one(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.patch(
            f"/decks/{deck_id}/rune/rune-01", json={"quantity": 2}, headers=USER
        )

        assert response.status_code == 409
        assert response.json()["failure"]["kind"] == "copy_limit_exceeded"

    async def test_rune_in_main_rejected(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.post(
            f"/decks/{deck_id}/main", json={"cardId": "rune-01"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["failure"]["kind"] == "invalid_card_type"

    async def test_remove_card_twice(self, client: AsyncClient, deck_id: str) -> None:
        await client.post(f"/decks/{deck_id}/rune", json={"cardId": "rune-01"}, headers=USER)

        first = await client.delete(f"/decks/{deck_id}/rune/rune-01", headers=USER)
        second = await client.delete(f"/decks/{deck_id}/rune/rune-01", headers=USER)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["runeItems"] == []
        assert second.json()["version"] == first.json()["version"]

    async def test_unknown_section(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.post(
            f"/decks/{deck_id}/sideboard", json={"cardId": "unit-01"}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["outcome"] == "known_failure"
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_quantity_zero_rejected_on_add(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.post(
            f"/decks/{deck_id}/main", json={"cardId": "unit-01", "quantity": 0}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["outcome"] == "refusal"
        assert response.json()["failure"]["kind"] == "invalid_quantity"


class TestValidation:
    async def test_empty_deck_report(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.get(f"/decks/{deck_id}/validate", headers=USER)

        data = response.json()
        assert data["valid"] is False
        assert "Legend is required." in data["errors"]
        assert "Main deck must have exactly 40 cards (currently 0)." in data["errors"]

    async def test_complete_deck_is_valid(self, client: AsyncClient, deck_id: str) -> None:
        deck = await _complete(client, deck_id)

        assert deck["mainCount"] == 40
        assert deck["runeCount"] == 12
        assert deck["nextStep"]["step"] == "complete"

        response = await client.get(f"/decks/{deck_id}?validate=true", headers=USER)
        assert response.json()["validation"] == {"valid": True, "errors": [], "warnings": []}

    async def test_full_main_deck(self, client: AsyncClient, deck_id: str) -> None:
        await _complete(client, deck_id)

        response = await client.post(
            f"/decks/{deck_id}/main", json={"cardId": "gear-unique"}, headers=USER
        )

        assert response.status_code == 409
        assert response.json()["failure"]["kind"] == "section_full"

    async def test_next_step(self, client: AsyncClient, deck_id: str) -> None:
        response = await client.get(f"/decks/{deck_id}/next-step", headers=USER)

        assert response.json() == {"step": "legend", "position": None}
    async def test_negative_quantity_rejected(self, client: AsyncClient, deck_id: str) -> None:
        await client.post(f"/decks/{deck_id}/main", json={"cardId": "unit-01"}, headers=USER)

        response = await client.patch(
            f"/decks/{deck_id}/main/unit-01", json={"quantity": -1}, headers=USER
        )

        assert response.status_code == 422
        assert response.json()["outcome"] == "refusal"
        assert response.json()["failure"]["kind"] == "invalid_quantity"

    async def test_zero_quantity_removes_card_missing_from_catalog(
        self, client: AsyncClient, deck_id: str, catalog: CardCatalog
    ) -> None:
        """A card dropped from the catalog can still be removed from a deck."""
        await client.post(f"/decks/{deck_id}/main", json={"cardId": "unit-01"}, headers=USER)
        trimmed = CardCatalog(card for card in catalog if card.card_id != "unit-01")
        app.dependency_overrides[get_card_catalog] = lambda: trimmed

        response = await client.patch(
            f"/decks/{deck_id}/main/unit-01", json={"quantity": 0}, headers=USER
        )

        assert response.status_code == 200
        assert response.json()["mainItems"] == []
