from dataclasses import dataclass
from enum import Enum


class CardType(str, Enum):
    """Card types recognised by the deck builder."""

    LEGEND = "legend"
    CHAMPION = "champion"
    UNIT = "unit"
    GEAR = "gear"
    SPELL = "spell"
    RUNE = "rune"
    BATTLEFIELD = "battlefield"
    OTHER = "other"


# Types that live in their own deck slot and never in the main deck
NON_MAIN_TYPES = frozenset(
    {CardType.LEGEND, CardType.CHAMPION, CardType.RUNE, CardType.BATTLEFIELD}
)

UNIQUE_ATTRIBUTE = "unique"


@dataclass(frozen=True, slots=True)
class Card:
    """
    A catalog card, read-only to the deck builder.

    Attributes:
        card_id: Opaque catalog identifier (UUID in the card API)
        name: Display name
        type: Card type, decides which deck section accepts the card
        domains: Thematic domain tags (fury, calm, mind, body, chaos, order)
        subtypes: Subtype tags, used for legend/champion compatibility
        supertypes: Supertype tags (e.g. "Champion")
        attributes: Free-form attribute tags (e.g. "Unique")
    """

    card_id: str
    name: str
    type: CardType
    domains: tuple[str, ...] = ()
    subtypes: tuple[str, ...] = ()
    supertypes: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()

    @property
    def is_unique(self) -> bool:
        """True if the card carries the "Unique" attribute."""
        return any(attr.lower() == UNIQUE_ATTRIBUTE for attr in self.attributes)

    @property
    def subtype_set(self) -> frozenset[str]:
        """Subtypes normalised to lowercase for comparisons."""
        return frozenset(s.lower() for s in self.subtypes)

    @property
    def domain_set(self) -> frozenset[str]:
        """Domains normalised to lowercase for comparisons."""
        return frozenset(d.lower() for d in self.domains)

    @property
    def belongs_in_main(self) -> bool:
        """True if the card type is accepted by the main deck."""
        return self.type not in NON_MAIN_TYPES
