"""
Deck validation.

Produces a DeckValidationReport for a deck at any stage of completion.
Every rule runs on every call and all violations are reported together.
The validator never raises: problems it cannot resolve (such as a card id
the catalog no longer knows) become errors in the report.

Rules that need card metadata (champion compatibility, section types,
unique copy limits, domain advisories) only run when a catalog is given.
"""

from collections import Counter

from riftforge.models.card import Card, CardType
from riftforge.models.deck import DEFAULT_RULES, DeckAggregate, DeckRules, DeckSection
from riftforge.models.validation import DeckValidationReport
from riftforge.services.card_catalog import CardCatalog
from riftforge.services.deck_rules import copy_limit_for, is_champion_compatible

LEGEND_REQUIRED = "Legend is required."
CHAMPION_REQUIRED = "Champion is required."
BATTLEFIELDS_REQUIRED = "All three battlefields must be set."


class _Checker:
    """Collects messages for a single validation run."""

    def __init__(self, deck: DeckAggregate, catalog: CardCatalog | None, rules: DeckRules):
        self.deck = deck
        self.catalog = catalog
        self.rules = rules
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self._reported_missing: set[str] = set()

    def resolve(self, card_id: str) -> Card | None:
        """Catalog card for an id; reports unknown ids once."""
        if self.catalog is None:
            return None
        card = self.catalog.find(card_id)
        if card is None and card_id not in self._reported_missing:
            self._reported_missing.add(card_id)
            self.errors.append(f"Card '{card_id}' was not found in the catalog.")
        return card

    def label(self, card_id: str) -> str:
        card = self.catalog.find(card_id) if self.catalog else None
        return card.name if card else card_id

    def check_leaders(self) -> None:
        deck = self.deck
        legend = champion = None

        if deck.legend_id is None:
            self.errors.append(LEGEND_REQUIRED)
        else:
            legend = self.resolve(deck.legend_id)
            if legend and legend.type is not CardType.LEGEND:
                self.errors.append(f"'{legend.name}' is not a legend.")
                legend = None

        if deck.champion_id is None:
            self.errors.append(CHAMPION_REQUIRED)
        else:
            champion = self.resolve(deck.champion_id)
            if champion and champion.type is not CardType.CHAMPION:
                self.errors.append(f"'{champion.name}' is not a champion.")
                champion = None

        if legend and champion and not is_champion_compatible(legend, champion):
            self.errors.append(
                f"Champion '{champion.name}' does not share a subtype with legend '{legend.name}'."
            )

    def check_battlefields(self) -> None:
        filled = [card_id for card_id in self.deck.battlefields if card_id is not None]
        if len(filled) < len(self.rules.battlefield_positions):
            self.errors.append(BATTLEFIELDS_REQUIRED)

        for card_id in dict.fromkeys(filled):
            card = self.resolve(card_id)
            if card and card.type is not CardType.BATTLEFIELD:
                self.errors.append(f"'{card.name}' is not a battlefield.")

        for card_id, count in Counter(filled).items():
            if count > 1:
                self.warnings.append(
                    f"Battlefield '{self.label(card_id)}' is used in {count} slots."
                )

    def check_section(self, section: DeckSection) -> None:
        size = self.rules.section_size(section)
        count = self.deck.section_count(section)
        if count != size:
            self.errors.append(
                f"{section.value.capitalize()} deck must have exactly {size} cards "
                f"(currently {count})."
            )

        for item in self.deck.items(section):
            card = self.resolve(item.card_id)
            if card is None:
                limit = self.rules.section_copy_limit(section)
            else:
                limit = copy_limit_for(card, section, self.rules)
                if section is DeckSection.RUNE and card.type is not CardType.RUNE:
                    self.errors.append(f"'{card.name}' is not a rune.")
                elif section is DeckSection.MAIN and not card.belongs_in_main:
                    self.errors.append(f"'{card.name}' cannot be in the main deck.")

            if item.quantity > limit:
                self.errors.append(
                    f"{section.value.capitalize()} deck has {item.quantity} copies of "
                    f"'{self.label(item.card_id)}' (limit {limit})."
                )

    def check_domains(self) -> None:
        if self.catalog is None or self.deck.legend_id is None:
            return
        legend = self.catalog.find(self.deck.legend_id)
        if legend is None or not legend.domain_set:
            return

        off_domain = 0
        for item in self.deck.main_items:
            card = self.catalog.find(item.card_id)
            if card and card.domain_set and not card.domain_set & legend.domain_set:
                off_domain += item.quantity
        if off_domain:
            self.warnings.append(
                f"{off_domain} main deck card(s) are outside the legend's domains."
            )

    def report(self) -> DeckValidationReport:
        return DeckValidationReport(errors=tuple(self.errors), warnings=tuple(self.warnings))


def validate_deck(
    deck: DeckAggregate,
    catalog: CardCatalog | None = None,
    rules: DeckRules = DEFAULT_RULES,
) -> DeckValidationReport:
    """
    Validate a deck.

    Args:
        deck: Deck in any state of completion
        catalog: Card catalog for metadata-dependent rules (optional)
        rules: Construction limits to validate against

    Returns:
        Report whose `valid` is True iff no errors were found
    """
    checker = _Checker(deck, catalog, rules)
    checker.check_leaders()
    checker.check_battlefields()
    checker.check_section(DeckSection.MAIN)
    checker.check_section(DeckSection.RUNE)
    checker.check_domains()
    return checker.report()
