"""
Deck composition rules.

Every change to a deck goes through one of the functions in this module.
Each function takes the current DeckAggregate plus the catalog cards
involved, checks the construction rules, and returns a NEW aggregate.

INVARIANT: A rejected change raises exactly one DeckRuleError and the
input aggregate is untouched. There is no partial application.

These functions do no I/O. Resolving card ids through the catalog and
persisting the result is the caller's job (see deck_service).
"""

from dataclasses import replace

from riftforge.config import UNIQUE_COPY_LIMIT, settings
from riftforge.models.card import Card, CardType
from riftforge.models.deck import (
    DEFAULT_DECK_NAME,
    DEFAULT_RULES,
    DeckAggregate,
    DeckLineItem,
    DeckRules,
    DeckSection,
)
from riftforge.models.failure import (
    CopyLimitExceededError,
    IncompatibleChampionError,
    InvalidCardTypeError,
    InvalidPositionError,
    InvalidQuantityError,
    MissingPrerequisiteError,
    SectionFullError,
)


def rules_from_settings() -> DeckRules:
    """Deck rules with the configured unique-card handling."""
    if settings.enforce_unique_copy_limit:
        return DeckRules(unique_copy_limit=UNIQUE_COPY_LIMIT)
    return DeckRules(unique_copy_limit=None)


def is_champion_compatible(legend: Card, champion: Card) -> bool:
    """A champion fits a legend when they share at least one subtype."""
    return bool(legend.subtype_set & champion.subtype_set)


def copy_limit_for(card: Card, section: DeckSection, rules: DeckRules = DEFAULT_RULES) -> int:
    """Maximum copies of `card` allowed in `section`."""
    limit = rules.section_copy_limit(section)
    if section is DeckSection.MAIN and card.is_unique and rules.unique_copy_limit is not None:
        return min(limit, rules.unique_copy_limit)
    return limit


def _require_type(card: Card, expected: CardType) -> None:
    if card.type is not expected:
        raise InvalidCardTypeError(card.card_id, card.type.value, expected.value)


def _require_section_type(card: Card, section: DeckSection) -> None:
    if section is DeckSection.RUNE:
        _require_type(card, CardType.RUNE)
    elif not card.belongs_in_main:
        raise InvalidCardTypeError(card.card_id, card.type.value, "a main deck card")


def _require_current(card: Card | None, card_id: str, role: str) -> Card:
    # Callers must pass the catalog card for the id already on the deck
    if card is None or card.card_id != card_id:
        raise ValueError(f"Current {role} card must be supplied for deck {role} '{card_id}'")
    return card


# =============================================================================
# LEGEND / CHAMPION / BATTLEFIELDS
# =============================================================================


def set_legend(
    deck: DeckAggregate,
    legend: Card,
    current_champion: Card | None = None,
) -> DeckAggregate:
    """
    Set the deck's legend.

    If the deck has a champion that shares no subtype with the new legend,
    the champion is cleared.

    Args:
        deck: Current deck
        legend: Catalog card to use as legend
        current_champion: Catalog card of the deck's current champion.
            Required when the deck has one.

    Raises:
        InvalidCardTypeError: If `legend` is not a legend card
    """
    _require_type(legend, CardType.LEGEND)

    champion_id = deck.champion_id
    if champion_id is not None:
        champion = _require_current(current_champion, champion_id, "champion")
        if not is_champion_compatible(legend, champion):
            champion_id = None

    return replace(deck, legend_id=legend.card_id, champion_id=champion_id)


def set_champion(
    deck: DeckAggregate,
    champion: Card,
    current_legend: Card | None = None,
) -> DeckAggregate:
    """
    Set the deck's champion.

    Args:
        deck: Current deck
        champion: Catalog card to use as champion
        current_legend: Catalog card of the deck's legend

    Raises:
        MissingPrerequisiteError: If the deck has no legend yet
        InvalidCardTypeError: If `champion` is not a champion card
        IncompatibleChampionError: If champion and legend share no subtype
    """
    if deck.legend_id is None:
        raise MissingPrerequisiteError()

    _require_type(champion, CardType.CHAMPION)
    legend = _require_current(current_legend, deck.legend_id, "legend")

    if not is_champion_compatible(legend, champion):
        raise IncompatibleChampionError(champion.card_id, legend.card_id)

    return replace(deck, champion_id=champion.card_id)


def set_battlefield(
    deck: DeckAggregate,
    position: int,
    card: Card | None,
    rules: DeckRules = DEFAULT_RULES,
) -> DeckAggregate:
    """
    Fill or clear one battlefield slot.

    The same battlefield may occupy more than one slot.

    Raises:
        InvalidPositionError: If `position` is not a battlefield slot
        InvalidCardTypeError: If `card` is not a battlefield card
    """
    if position not in rules.battlefield_positions:
        raise InvalidPositionError(position)

    if card is not None:
        _require_type(card, CardType.BATTLEFIELD)

    slots = list(deck.battlefields)
    slots[rules.battlefield_positions.index(position)] = card.card_id if card else None
    return replace(deck, battlefields=tuple(slots))


def rename_deck(deck: DeckAggregate, name: str) -> DeckAggregate:
    """Change the display name. Names need not be unique; a blank name resets to the default."""
    return replace(deck, name=name.strip() or DEFAULT_DECK_NAME)


# =============================================================================
# MAIN / RUNE SECTIONS
# =============================================================================


def _with_quantity(
    deck: DeckAggregate,
    section: DeckSection,
    card_id: str,
    quantity: int,
) -> DeckAggregate:
    """Return a deck whose `section` holds `quantity` copies of `card_id`."""
    items: list[DeckLineItem] = []
    placed = False
    for item in deck.items(section):
        if item.card_id == card_id:
            placed = True
            if quantity > 0:
                items.append(DeckLineItem(card_id, quantity))
        else:
            items.append(item)
    if not placed and quantity > 0:
        items.append(DeckLineItem(card_id, quantity))

    if section is DeckSection.MAIN:
        return replace(deck, main_items=tuple(items))
    return replace(deck, rune_items=tuple(items))


def add_card(
    deck: DeckAggregate,
    section: DeckSection,
    card: Card,
    delta: int = 1,
    rules: DeckRules = DEFAULT_RULES,
) -> DeckAggregate:
    """
    Add `delta` copies of a card to a section.

    Raises:
        InvalidQuantityError: If `delta` is less than 1
        InvalidCardTypeError: If the card does not belong in the section
        SectionFullError: If the section would exceed its card ceiling
        CopyLimitExceededError: If the card would exceed its copy limit
    """
    if delta < 1:
        raise InvalidQuantityError(delta, minimum=1)

    _require_section_type(card, section)

    resulting_total = deck.section_count(section) + delta
    size = rules.section_size(section)
    if resulting_total > size:
        raise SectionFullError(section.value, size, resulting_total)

    resulting = deck.quantity_of(section, card.card_id) + delta
    limit = copy_limit_for(card, section, rules)
    if resulting > limit:
        raise CopyLimitExceededError(card.card_id, limit, resulting)

    return _with_quantity(deck, section, card.card_id, resulting)


def set_card_quantity(
    deck: DeckAggregate,
    section: DeckSection,
    card: Card,
    quantity: int,
    rules: DeckRules = DEFAULT_RULES,
) -> DeckAggregate:
    """
    Set the number of copies of a card in a section. 0 removes the card.

    Raises:
        InvalidQuantityError: If `quantity` is negative
        InvalidCardTypeError: If the card does not belong in the section
        CopyLimitExceededError: If `quantity` exceeds the card's copy limit
        SectionFullError: If the section would exceed its card ceiling
    """
    if quantity < 0:
        raise InvalidQuantityError(quantity, minimum=0)
    if quantity == 0:
        return remove_card(deck, section, card.card_id)

    _require_section_type(card, section)

    limit = copy_limit_for(card, section, rules)
    if quantity > limit:
        raise CopyLimitExceededError(card.card_id, limit, quantity)

    current = deck.quantity_of(section, card.card_id)
    resulting_total = deck.section_count(section) - current + quantity
    size = rules.section_size(section)
    if resulting_total > size:
        raise SectionFullError(section.value, size, resulting_total)

    return _with_quantity(deck, section, card.card_id, quantity)


def remove_card(deck: DeckAggregate, section: DeckSection, card_id: str) -> DeckAggregate:
    """Remove every copy of a card from a section. Absent cards are a no-op."""
    if deck.quantity_of(section, card_id) == 0:
        return deck
    return _with_quantity(deck, section, card_id, 0)


def add_main_card(
    deck: DeckAggregate, card: Card, delta: int = 1, rules: DeckRules = DEFAULT_RULES
) -> DeckAggregate:
    return add_card(deck, DeckSection.MAIN, card, delta, rules)


def set_main_card_quantity(
    deck: DeckAggregate, card: Card, quantity: int, rules: DeckRules = DEFAULT_RULES
) -> DeckAggregate:
    return set_card_quantity(deck, DeckSection.MAIN, card, quantity, rules)


def remove_main_card(deck: DeckAggregate, card_id: str) -> DeckAggregate:
    return remove_card(deck, DeckSection.MAIN, card_id)


def add_rune_card(
    deck: DeckAggregate, card: Card, delta: int = 1, rules: DeckRules = DEFAULT_RULES
) -> DeckAggregate:
    return add_card(deck, DeckSection.RUNE, card, delta, rules)


def set_rune_card_quantity(
    deck: DeckAggregate, card: Card, quantity: int, rules: DeckRules = DEFAULT_RULES
) -> DeckAggregate:
    return set_card_quantity(deck, DeckSection.RUNE, card, quantity, rules)


def remove_rune_card(deck: DeckAggregate, card_id: str) -> DeckAggregate:
    return remove_card(deck, DeckSection.RUNE, card_id)
