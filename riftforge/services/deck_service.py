"""
Deck service.

Runs deck changes end to end: load the deck, resolve card ids through the
catalog, apply the composition rule, save the result. Each function maps
to one deck operation exposed by the API.

Ownership is enforced here. A deck that belongs to another user is
reported as not found.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from riftforge.db.operations import (
    create_deck,
    delete_deck,
    deck_to_model,
    list_decks,
    load_deck,
    save_deck,
)
from riftforge.models.deck import DEFAULT_DECK_NAME, DeckAggregate, DeckRules, DeckSection
from riftforge.models.failure import DeckNotFoundError, DeckRuleError, InvalidPositionError
from riftforge.models.validation import DeckValidationReport
from riftforge.services import deck_rules
from riftforge.services.card_catalog import CardCatalog
from riftforge.services.deck_validator import validate_deck

logger = logging.getLogger(__name__)

DeckChange = Callable[[DeckAggregate], DeckAggregate]


async def create_owned_deck(
    session: AsyncSession, owner_id: str, name: str | None = None
) -> DeckAggregate:
    """Create an empty deck for a user."""
    deck = await create_deck(session, owner_id, (name or "").strip() or DEFAULT_DECK_NAME)
    logger.info("Created deck %s for %s", deck.deck_id, owner_id)
    return deck


async def get_owned_deck(session: AsyncSession, deck_id: str, owner_id: str) -> DeckAggregate:
    """
    Load a deck owned by `owner_id`.

    Raises:
        DeckNotFoundError: If the deck is missing or owned by someone else
    """
    deck = await load_deck(session, deck_id)
    if deck.owner_id != owner_id:
        raise DeckNotFoundError(deck_id)
    return deck


async def list_owned_decks(session: AsyncSession, owner_id: str) -> list[DeckAggregate]:
    """All decks of a user, most recently changed first."""
    return [deck_to_model(db_deck) for db_deck in await list_decks(session, owner_id)]


async def remove_owned_deck(session: AsyncSession, deck_id: str, owner_id: str) -> None:
    """
    Delete a deck. Deletion is immediate and permanent.

    Raises:
        DeckNotFoundError: If the deck is missing or owned by someone else
    """
    await get_owned_deck(session, deck_id, owner_id)
    await delete_deck(session, deck_id)
    logger.info("Deleted deck %s", deck_id)


async def validate_owned_deck(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    rules: DeckRules | None = None,
) -> tuple[DeckAggregate, DeckValidationReport]:
    """Load a deck and validate it against the catalog."""
    deck = await get_owned_deck(session, deck_id, owner_id)
    return deck, validate_deck(deck, catalog, rules or deck_rules.rules_from_settings())


async def _apply(
    session: AsyncSession,
    deck_id: str,
    owner_id: str,
    change: DeckChange,
) -> DeckAggregate:
    """Load, change and save a deck. Unchanged decks are not re-saved."""
    deck = await get_owned_deck(session, deck_id, owner_id)
    try:
        updated = change(deck)
    except DeckRuleError as e:
        logger.info("Rejected change to deck %s: %s", deck_id, e.detail)
        raise

    if updated == deck:
        return deck

    saved = await save_deck(session, updated)
    logger.debug("Saved deck %s at version %d", deck_id, saved.version)
    return saved


# =============================================================================
# DECK OPERATIONS
# =============================================================================


async def rename(
    session: AsyncSession, deck_id: str, owner_id: str, name: str
) -> DeckAggregate:
    return await _apply(session, deck_id, owner_id, lambda deck: deck_rules.rename_deck(deck, name))


async def set_legend(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    card_id: str,
) -> DeckAggregate:
    """Set the legend; an incompatible champion is cleared."""
    legend = catalog.get(card_id)

    def change(deck: DeckAggregate) -> DeckAggregate:
        champion = catalog.get(deck.champion_id) if deck.champion_id else None
        return deck_rules.set_legend(deck, legend, champion)

    return await _apply(session, deck_id, owner_id, change)


async def set_champion(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    card_id: str,
) -> DeckAggregate:
    champion = catalog.get(card_id)

    def change(deck: DeckAggregate) -> DeckAggregate:
        legend = catalog.get(deck.legend_id) if deck.legend_id else None
        return deck_rules.set_champion(deck, champion, legend)

    return await _apply(session, deck_id, owner_id, change)


async def set_battlefield(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    position: int,
    card_id: str | None,
    rules: DeckRules | None = None,
) -> DeckAggregate:
    """Fill a battlefield slot, or clear it when `card_id` is None."""
    active = rules or deck_rules.rules_from_settings()
    if position not in active.battlefield_positions:
        raise InvalidPositionError(position)
    card = catalog.get(card_id) if card_id is not None else None
    return await _apply(
        session,
        deck_id,
        owner_id,
        lambda deck: deck_rules.set_battlefield(deck, position, card, active),
    )


async def add_card(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    section: DeckSection,
    card_id: str,
    quantity: int = 1,
    rules: DeckRules | None = None,
) -> DeckAggregate:
    """Add copies of a card to the main or rune deck."""
    card = catalog.get(card_id)
    active = rules or deck_rules.rules_from_settings()
    return await _apply(
        session,
        deck_id,
        owner_id,
        lambda deck: deck_rules.add_card(deck, section, card, quantity, active),
    )


async def set_card_quantity(
    session: AsyncSession,
    catalog: CardCatalog,
    deck_id: str,
    owner_id: str,
    section: DeckSection,
    card_id: str,
    quantity: int,
    rules: DeckRules | None = None,
) -> DeckAggregate:
    """Set the copies of a card in the main or rune deck; 0 removes it."""
    if quantity == 0:
        # No catalog lookup, so cards dropped from the catalog stay removable
        return await remove_card(session, deck_id, owner_id, section, card_id)
    card = catalog.get(card_id)
    active = rules or deck_rules.rules_from_settings()
    return await _apply(
        session,
        deck_id,
        owner_id,
        lambda deck: deck_rules.set_card_quantity(deck, section, card, quantity, active),
    )


async def remove_card(
    session: AsyncSession,
    deck_id: str,
    owner_id: str,
    section: DeckSection,
    card_id: str,
) -> DeckAggregate:
    """Remove a card from the main or rune deck. Absent cards are a no-op."""
    return await _apply(
        session,
        deck_id,
        owner_id,
        lambda deck: deck_rules.remove_card(deck, section, card_id),
    )
