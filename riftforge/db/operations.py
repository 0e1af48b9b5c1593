"""
Database CRUD operations.

Provides async functions for creating, reading, saving, and deleting decks.
This is the deck repository: it stores DeckAggregate values and knows
nothing about deck rules.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from riftforge.models.db import DeckBattlefieldDB, DeckDB, DeckMainItemDB, DeckRuneItemDB
from riftforge.models.deck import DEFAULT_DECK_NAME, DeckAggregate, DeckLineItem
from riftforge.models.failure import DeckConflictError, DeckNotFoundError

_DECK_LOAD_OPTIONS = (
    selectinload(DeckDB.main_items),
    selectinload(DeckDB.rune_items),
    selectinload(DeckDB.battlefields),
)


async def get_deck(session: AsyncSession, deck_id: str) -> DeckDB | None:
    """
    Get a deck with its line items and battlefields.

    Returns None if the deck does not exist.
    """
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id).options(*_DECK_LOAD_OPTIONS)
    )
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, owner_id: str) -> list[DeckDB]:
    """Get all decks of a user, most recently changed first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.owner_id == owner_id)
        .order_by(DeckDB.updated_at.desc(), DeckDB.name)
        .options(*_DECK_LOAD_OPTIONS)
    )
    return list(result.scalars().all())


async def create_deck(
    session: AsyncSession, owner_id: str, name: str = DEFAULT_DECK_NAME
) -> DeckAggregate:
    """Create an empty deck with a fresh identifier."""
    # Collections are set explicitly so no lazy load is attempted later
    db_deck = DeckDB(
        owner_id=owner_id,
        name=name,
        version=0,
        main_items=[],
        rune_items=[],
        battlefields=[],
    )
    session.add(db_deck)
    await session.flush()
    return deck_to_model(db_deck)


async def load_deck(session: AsyncSession, deck_id: str) -> DeckAggregate:
    """
    Load a deck as a DeckAggregate.

    Raises:
        DeckNotFoundError: If the deck does not exist
    """
    db_deck = await get_deck(session, deck_id)
    if db_deck is None:
        raise DeckNotFoundError(deck_id)
    return deck_to_model(db_deck)


def _sync_line_items(
    rows: list[DeckMainItemDB] | list[DeckRuneItemDB],
    items: tuple[DeckLineItem, ...],
    row_type: type[DeckMainItemDB] | type[DeckRuneItemDB],
) -> None:
    """Make `rows` match `items`, updating rows in place where possible."""
    wanted = {item.card_id: item.quantity for item in items}

    for row in list(rows):
        if row.card_id in wanted:
            row.quantity = wanted.pop(row.card_id)
        else:
            rows.remove(row)  # type: ignore[arg-type]

    for card_id, quantity in wanted.items():
        rows.append(row_type(card_id=card_id, quantity=quantity))  # type: ignore[arg-type]


def _sync_battlefields(rows: list[DeckBattlefieldDB], slots: tuple[str | None, ...]) -> None:
    wanted = {
        position: card_id
        for position, card_id in enumerate(slots, start=1)
        if card_id is not None
    }

    for row in list(rows):
        if row.position in wanted:
            row.card_id = wanted.pop(row.position)
        else:
            rows.remove(row)

    for position, card_id in wanted.items():
        rows.append(DeckBattlefieldDB(position=position, card_id=card_id))


async def save_deck(session: AsyncSession, deck: DeckAggregate) -> DeckAggregate:
    """
    Persist a deck's full state.

    The stored version must still equal `deck.version`; it is bumped by one
    on success.

    Returns:
        The saved deck carrying its new version.

    Raises:
        DeckNotFoundError: If the deck was deleted
        DeckConflictError: If the deck was saved by another request since
            `deck` was loaded
    """
    db_deck = await get_deck(session, deck.deck_id)
    if db_deck is None:
        raise DeckNotFoundError(deck.deck_id)
    if db_deck.version != deck.version:
        raise DeckConflictError(deck.deck_id, deck.version)

    db_deck.name = deck.name
    db_deck.legend_card_id = deck.legend_id
    db_deck.champion_card_id = deck.champion_id
    _sync_line_items(db_deck.main_items, deck.main_items, DeckMainItemDB)
    _sync_line_items(db_deck.rune_items, deck.rune_items, DeckRuneItemDB)
    _sync_battlefields(db_deck.battlefields, deck.battlefields)
    db_deck.version = deck.version + 1

    try:
        await session.flush()
    except StaleDataError as e:
        # Row version moved on between our read and our write
        raise DeckConflictError(deck.deck_id, deck.version) from e

    return deck_to_model(db_deck)


def deck_to_model(db_deck: DeckDB) -> DeckAggregate:
    """Convert a database deck to a domain model."""
    battlefields: list[str | None] = [None, None, None]
    for row in db_deck.battlefields:
        battlefields[row.position - 1] = row.card_id

    return DeckAggregate(
        deck_id=db_deck.id,
        owner_id=db_deck.owner_id,
        name=db_deck.name,
        legend_id=db_deck.legend_card_id,
        champion_id=db_deck.champion_card_id,
        battlefields=tuple(battlefields),
        main_items=tuple(
            DeckLineItem(row.card_id, row.quantity)
            for row in sorted(db_deck.main_items, key=lambda r: r.card_id)
        ),
        rune_items=tuple(
            DeckLineItem(row.card_id, row.quantity)
            for row in sorted(db_deck.rune_items, key=lambda r: r.card_id)
        ),
        version=db_deck.version,
    )


async def delete_deck(session: AsyncSession, deck_id: str) -> bool:
    """
    Delete a deck with all its items.

    Returns True if deleted, False if not found.
    """
    db_deck = await get_deck(session, deck_id)
    if not db_deck:
        return False

    await session.delete(db_deck)
    await session.flush()
    return True
