from riftforge.db.database import get_session, init_db
from riftforge.db.operations import (
    create_deck,
    deck_to_model,
    delete_deck,
    get_deck,
    list_decks,
    load_deck,
    save_deck,
)

__all__ = [
    "create_deck",
    "deck_to_model",
    "delete_deck",
    "get_deck",
    "get_session",
    "init_db",
    "list_decks",
    "load_deck",
    "save_deck",
]
