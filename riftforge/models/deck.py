from dataclasses import dataclass, field
from enum import Enum

from riftforge.config import (
    BATTLEFIELD_POSITIONS,
    MAIN_COPY_LIMIT,
    MAIN_DECK_SIZE,
    RUNE_COPY_LIMIT,
    RUNE_DECK_SIZE,
    UNIQUE_COPY_LIMIT,
)

DEFAULT_DECK_NAME = "New Deck"


class DeckSection(str, Enum):
    """Quantity-tracked sections of a deck."""

    MAIN = "main"
    RUNE = "rune"


class DeckStep(str, Enum):
    """Deck-building steps, in the order a deck is completed."""

    LEGEND = "legend"
    CHAMPION = "champion"
    BATTLEFIELD = "battlefield"
    MAIN = "main"
    RUNE = "rune"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class DeckRules:
    """
    Construction limits applied by the rule engine and the validator.

    Attributes:
        main_deck_size: Exact main deck size for a legal deck (and its ceiling)
        rune_deck_size: Exact rune deck size for a legal deck (and its ceiling)
        main_copy_limit: Copies allowed per main deck card
        rune_copy_limit: Copies allowed per rune card
        unique_copy_limit: Copies allowed for "Unique" main deck cards,
            None to treat them like any other card
        battlefield_positions: Valid battlefield slot positions
    """

    main_deck_size: int = MAIN_DECK_SIZE
    rune_deck_size: int = RUNE_DECK_SIZE
    main_copy_limit: int = MAIN_COPY_LIMIT
    rune_copy_limit: int = RUNE_COPY_LIMIT
    unique_copy_limit: int | None = UNIQUE_COPY_LIMIT
    battlefield_positions: tuple[int, ...] = BATTLEFIELD_POSITIONS

    def section_size(self, section: DeckSection) -> int:
        """Card ceiling of a section."""
        if section is DeckSection.MAIN:
            return self.main_deck_size
        return self.rune_deck_size

    def section_copy_limit(self, section: DeckSection) -> int:
        """Default per-card copy limit of a section."""
        if section is DeckSection.MAIN:
            return self.main_copy_limit
        return self.rune_copy_limit


DEFAULT_RULES = DeckRules()


@dataclass(frozen=True, slots=True)
class DeckLineItem:
    """Copies of one card placed in a deck section."""

    card_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class NextStep:
    """The next incomplete deck-building step (position set for battlefields)."""

    step: DeckStep
    position: int | None = None


@dataclass(frozen=True)
class DeckAggregate:
    """
    The full state of one deck.

    Immutable: rule engine operations return a new aggregate instead of
    modifying this one. Counts are always derived from the line items.

    Attributes:
        deck_id: Deck identifier
        owner_id: Identifier of the owning user
        name: Display name (not unique)
        legend_id: Card id of the legend, if set
        champion_id: Card id of the champion, if set
        battlefields: Card id per battlefield slot (index 0 is position 1)
        main_items: Main deck line items, one per card id
        rune_items: Rune deck line items, one per card id
        version: Persistence version used to detect concurrent writes
    """

    deck_id: str
    owner_id: str
    name: str = DEFAULT_DECK_NAME
    legend_id: str | None = None
    champion_id: str | None = None
    battlefields: tuple[str | None, ...] = (None,) * len(BATTLEFIELD_POSITIONS)
    main_items: tuple[DeckLineItem, ...] = field(default_factory=tuple)
    rune_items: tuple[DeckLineItem, ...] = field(default_factory=tuple)
    version: int = 0

    def items(self, section: DeckSection) -> tuple[DeckLineItem, ...]:
        """Line items of a section."""
        if section is DeckSection.MAIN:
            return self.main_items
        return self.rune_items

    def quantity_of(self, section: DeckSection, card_id: str) -> int:
        """Copies of a card in a section, 0 if absent."""
        for item in self.items(section):
            if item.card_id == card_id:
                return item.quantity
        return 0

    def section_count(self, section: DeckSection) -> int:
        """Total copies in a section."""
        return sum(item.quantity for item in self.items(section))

    @property
    def main_count(self) -> int:
        return self.section_count(DeckSection.MAIN)

    @property
    def rune_count(self) -> int:
        return self.section_count(DeckSection.RUNE)

    @property
    def battlefield_count(self) -> int:
        """Number of filled battlefield slots."""
        return sum(1 for card_id in self.battlefields if card_id is not None)

    def battlefield_at(self, position: int) -> str | None:
        """Card id in a battlefield slot (1-based position)."""
        return self.battlefields[position - 1]

    def card_ids(self) -> set[str]:
        """Every card id referenced anywhere in the deck."""
        ids = {item.card_id for item in self.main_items}
        ids.update(item.card_id for item in self.rune_items)
        ids.update(card_id for card_id in self.battlefields if card_id is not None)
        if self.legend_id is not None:
            ids.add(self.legend_id)
        if self.champion_id is not None:
            ids.add(self.champion_id)
        return ids

    def next_step(self, rules: DeckRules = DEFAULT_RULES) -> NextStep:
        """
        First incomplete deck-building step.

        Steps are checked in order: legend, champion, each battlefield slot,
        main deck, rune deck. Derived on every call, never stored.
        """
        if self.legend_id is None:
            return NextStep(DeckStep.LEGEND)
        if self.champion_id is None:
            return NextStep(DeckStep.CHAMPION)
        for position, card_id in zip(rules.battlefield_positions, self.battlefields):
            if card_id is None:
                return NextStep(DeckStep.BATTLEFIELD, position)
        if self.main_count < rules.main_deck_size:
            return NextStep(DeckStep.MAIN)
        if self.rune_count < rules.rune_deck_size:
            return NextStep(DeckStep.RUNE)
        return NextStep(DeckStep.COMPLETE)
