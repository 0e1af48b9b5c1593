"""
RiftForge services.

Deck composition rules, deck validation, the card catalog, and the deck
service that ties them to storage.
"""

from riftforge.services.card_catalog import (
    CardCatalog,
    card_from_record,
    download_card_catalog,
    get_card_catalog,
    load_card_catalog,
)
from riftforge.services.deck_rules import (
    add_card,
    add_main_card,
    add_rune_card,
    copy_limit_for,
    is_champion_compatible,
    remove_card,
    remove_main_card,
    remove_rune_card,
    rename_deck,
    rules_from_settings,
    set_battlefield,
    set_card_quantity,
    set_champion,
    set_legend,
    set_main_card_quantity,
    set_rune_card_quantity,
)
from riftforge.services.deck_validator import validate_deck

__all__ = [
    "CardCatalog",
    "add_card",
    "add_main_card",
    "add_rune_card",
    "card_from_record",
    "copy_limit_for",
    "download_card_catalog",
    "get_card_catalog",
    "is_champion_compatible",
    "load_card_catalog",
    "remove_card",
    "remove_main_card",
    "remove_rune_card",
    "rename_deck",
    "rules_from_settings",
    "set_battlefield",
    "set_card_quantity",
    "set_champion",
    "set_legend",
    "set_main_card_quantity",
    "set_rune_card_quantity",
    "validate_deck",
]
