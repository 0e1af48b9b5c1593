import pytest

from riftforge.models import failure as failure_module
from riftforge.models.card import Card, CardType
from riftforge.models.deck import DeckAggregate
from riftforge.services import deck_rules
from riftforge.services.card_catalog import CardCatalog


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    This prevents test isolation issues where Python reuses memory
    addresses for new objects, causing id() collisions with previously
    finalized responses.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


@pytest.fixture
def legend() -> Card:
    return Card(
        card_id="leg-jinx",
        name="Jinx, Loose Cannon",
        type=CardType.LEGEND,
        domains=("Fury", "Chaos"),
        subtypes=("Jinx",),
    )


@pytest.fixture
def champion() -> Card:
    return Card(
        card_id="champ-jinx",
        name="Jinx, Rebel",
        type=CardType.CHAMPION,
        domains=("Fury",),
        subtypes=("Jinx",),
        supertypes=("Champion",),
    )


@pytest.fixture
def other_legend() -> Card:
    return Card(
        card_id="leg-garen",
        name="Garen, Might of Demacia",
        type=CardType.LEGEND,
        domains=("Body", "Order"),
        subtypes=("Garen",),
    )


@pytest.fixture
def other_champion() -> Card:
    return Card(
        card_id="champ-garen",
        name="Garen, Commander",
        type=CardType.CHAMPION,
        domains=("Body",),
        subtypes=("Garen",),
        supertypes=("Champion",),
    )


@pytest.fixture
def battlefields() -> list[Card]:
    return [
        Card(card_id=f"bf-{i}", name=f"Battlefield {i}", type=CardType.BATTLEFIELD)
        for i in range(1, 4)
    ]


@pytest.fixture
def main_cards() -> list[Card]:
    """Fourteen fury units: enough for 40 cards at three copies each."""
    return [
        Card(card_id=f"unit-{i:02d}", name=f"Unit {i:02d}", type=CardType.UNIT, domains=("Fury",))
        for i in range(1, 15)
    ]


@pytest.fixture
def rune_cards() -> list[Card]:
    return [
        Card(card_id=f"rune-{i:02d}", name=f"Fury Rune {i:02d}", type=CardType.RUNE)
        for i in range(1, 13)
    ]


@pytest.fixture
def unique_card() -> Card:
    return Card(
        card_id="gear-unique",
        name="The Only One",
        type=CardType.GEAR,
        domains=("Fury",),
        attributes=("Unique",),
    )


@pytest.fixture
def off_domain_card() -> Card:
    return Card(card_id="spell-calm", name="Calm Spell", type=CardType.SPELL, domains=("Calm",))


@pytest.fixture
def catalog(
    legend: Card,
    champion: Card,
    other_legend: Card,
    other_champion: Card,
    battlefields: list[Card],
    main_cards: list[Card],
    rune_cards: list[Card],
    unique_card: Card,
    off_domain_card: Card,
) -> CardCatalog:
    return CardCatalog(
        [
            legend,
            champion,
            other_legend,
            other_champion,
            *battlefields,
            *main_cards,
            *rune_cards,
            unique_card,
            off_domain_card,
        ]
    )


@pytest.fixture
def empty_deck() -> DeckAggregate:
    return DeckAggregate(deck_id="deck-1", owner_id="user-1")


@pytest.fixture
def complete_deck(
    empty_deck: DeckAggregate,
    legend: Card,
    champion: Card,
    battlefields: list[Card],
    main_cards: list[Card],
    rune_cards: list[Card],
) -> DeckAggregate:
    """A legal deck built only through rule engine operations."""
    deck = deck_rules.set_legend(empty_deck, legend)
    deck = deck_rules.set_champion(deck, champion, legend)
    for position, battlefield in enumerate(battlefields, start=1):
        deck = deck_rules.set_battlefield(deck, position, battlefield)
    for card in main_cards[:13]:
        deck = deck_rules.add_main_card(deck, card, 3)
    deck = deck_rules.add_main_card(deck, main_cards[13])
    for rune in rune_cards:
        deck = deck_rules.add_rune_card(deck, rune)
    return deck
