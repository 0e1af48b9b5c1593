"""
Deck API endpoints.

Provides CRUD and deck-building operations for a user's decks. The user is
identified by the X-User-Id header set by the authenticating proxy.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, status
from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from riftforge.db.database import get_session
from riftforge.models.deck import DeckAggregate, DeckSection, DeckStep, NextStep
from riftforge.models.failure import FailureKind, KnownError
from riftforge.models.validation import DeckValidationReport
from riftforge.services import deck_service
from riftforge.services.card_catalog import CardCatalog, get_card_catalog
from riftforge.services.deck_rules import rules_from_settings
from riftforge.services.deck_validator import validate_deck

router = APIRouter(prefix="/decks", tags=["decks"])


class CamelModel(BaseModel):
    """Base model using the web client's camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Response models ---


class LineItemResponse(CamelModel):
    """Copies of one card in a deck section."""

    card_id: str
    quantity: int


class BattlefieldResponse(CamelModel):
    """One battlefield slot; card_id is None when empty."""

    position: int
    card_id: str | None = None


class NextStepResponse(CamelModel):
    """Next incomplete deck-building step."""

    step: DeckStep
    position: int | None = None


class ValidationResponse(CamelModel):
    """Deck validation report."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class DeckResponse(CamelModel):
    """Response model for a single deck."""

    id: str
    user_id: str
    name: str
    legend_card_id: str | None = None
    champion_card_id: str | None = None
    battlefields: list[BattlefieldResponse] = Field(default_factory=list)
    main_items: list[LineItemResponse] = Field(default_factory=list)
    rune_items: list[LineItemResponse] = Field(default_factory=list)
    main_count: int = 0
    rune_count: int = 0
    battlefield_count: int = 0
    next_step: NextStepResponse
    version: int = 0
    validation: ValidationResponse | None = Field(
        default=None,
        description="Present when validation was requested",
    )


class DeckListResponse(CamelModel):
    """Response model for a list of decks."""

    decks: list[DeckResponse]
    count: int


class DeleteResponse(CamelModel):
    """Response model for delete operations."""

    deck_id: str
    deleted: bool


# --- Request models ---


class CreateDeckRequest(CamelModel):
    name: str | None = Field(default=None, max_length=255)


class RenameDeckRequest(CamelModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class CardRequest(CamelModel):
    card_id: str = Field(..., min_length=1)


class BattlefieldRequest(CamelModel):
    card_id: str | None = Field(
        default=None,
        description="Battlefield card id, or null to clear the slot",
    )


class AddCardRequest(CamelModel):
    card_id: str = Field(..., min_length=1)
    quantity: int = 1


class QuantityRequest(CamelModel):
    quantity: int = Field(..., description="New number of copies; 0 removes the card")


# --- Conversion ---


def report_to_response(report: DeckValidationReport) -> ValidationResponse:
    return ValidationResponse(
        valid=report.valid,
        errors=list(report.errors),
        warnings=list(report.warnings),
    )


def deck_to_response(
    deck: DeckAggregate, report: DeckValidationReport | None = None
) -> DeckResponse:
    """Convert a deck (and optional report) to its API shape."""
    rules = rules_from_settings()
    next_step: NextStep = deck.next_step(rules)
    return DeckResponse(
        id=deck.deck_id,
        user_id=deck.owner_id,
        name=deck.name,
        legend_card_id=deck.legend_id,
        champion_card_id=deck.champion_id,
        battlefields=[
            BattlefieldResponse(position=position, card_id=card_id)
            for position, card_id in zip(rules.battlefield_positions, deck.battlefields)
        ],
        main_items=[
            LineItemResponse(card_id=item.card_id, quantity=item.quantity)
            for item in deck.main_items
        ],
        rune_items=[
            LineItemResponse(card_id=item.card_id, quantity=item.quantity)
            for item in deck.rune_items
        ],
        main_count=deck.main_count,
        rune_count=deck.rune_count,
        battlefield_count=deck.battlefield_count,
        next_step=NextStepResponse(step=next_step.step, position=next_step.position),
        version=deck.version,
        validation=report_to_response(report) if report is not None else None,
    )


# --- Dependencies ---


async def get_owner_id(
    user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    """Identifier of the calling user."""
    if not user_id:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Sign in to manage decks.",
            detail="Missing X-User-Id header",
            status_code=401,
        )
    return user_id


Session = Annotated[AsyncSession, Depends(get_session)]
Catalog = Annotated[CardCatalog, Depends(get_card_catalog)]
OwnerId = Annotated[str, Depends(get_owner_id)]


# --- Deck CRUD ---


@router.get("", response_model=DeckListResponse)
async def list_decks(session: Session, owner_id: OwnerId) -> DeckListResponse:
    """List the current user's decks, most recently changed first."""
    decks = await deck_service.list_owned_decks(session, owner_id)
    return DeckListResponse(decks=[deck_to_response(d) for d in decks], count=len(decks))


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    session: Session,
    owner_id: OwnerId,
    request: CreateDeckRequest | None = None,
) -> DeckResponse:
    """Create an empty deck."""
    name = request.name if request else None
    deck = await deck_service.create_owned_deck(session, owner_id, name)
    return deck_to_response(deck)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck(
    deck_id: str,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
    validate: Annotated[bool, Query()] = False,
) -> DeckResponse:
    """
    Get one deck.

    With ?validate=true the validation report is included.
    """
    deck = await deck_service.get_owned_deck(session, deck_id, owner_id)
    report = validate_deck(deck, catalog, rules_from_settings()) if validate else None
    return deck_to_response(deck, report)


@router.get("/{deck_id}/validate", response_model=ValidationResponse)
async def get_deck_validation(
    deck_id: str,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> ValidationResponse:
    """Validation report only."""
    _, report = await deck_service.validate_owned_deck(session, catalog, deck_id, owner_id)
    return report_to_response(report)


@router.get("/{deck_id}/next-step", response_model=NextStepResponse)
async def get_next_step(deck_id: str, session: Session, owner_id: OwnerId) -> NextStepResponse:
    """Next deck-building step the user still has to complete."""
    deck = await deck_service.get_owned_deck(session, deck_id, owner_id)
    next_step = deck.next_step(rules_from_settings())
    return NextStepResponse(step=next_step.step, position=next_step.position)


@router.patch("/{deck_id}", response_model=DeckResponse)
async def rename_deck(
    deck_id: str,
    request: RenameDeckRequest,
    session: Session,
    owner_id: OwnerId,
) -> DeckResponse:
    """Change the deck's name."""
    deck = await deck_service.rename(session, deck_id, owner_id, request.name)
    return deck_to_response(deck)


@router.delete("/{deck_id}", response_model=DeleteResponse)
async def delete_deck(deck_id: str, session: Session, owner_id: OwnerId) -> DeleteResponse:
    """Delete a deck permanently."""
    await deck_service.remove_owned_deck(session, deck_id, owner_id)
    return DeleteResponse(deck_id=deck_id, deleted=True)


# --- Legend / champion / battlefields ---


@router.put("/{deck_id}/legend", response_model=DeckResponse)
async def set_legend(
    deck_id: str,
    request: CardRequest,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> DeckResponse:
    """Set the legend. A champion that no longer fits is cleared."""
    deck = await deck_service.set_legend(session, catalog, deck_id, owner_id, request.card_id)
    return deck_to_response(deck)


@router.put("/{deck_id}/champion", response_model=DeckResponse)
async def set_champion(
    deck_id: str,
    request: CardRequest,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> DeckResponse:
    """Set the champion. Requires a legend sharing a subtype with it."""
    deck = await deck_service.set_champion(session, catalog, deck_id, owner_id, request.card_id)
    return deck_to_response(deck)


@router.put("/{deck_id}/battlefields/{position}", response_model=DeckResponse)
async def set_battlefield(
    deck_id: str,
    position: int,
    request: BattlefieldRequest,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> DeckResponse:
    """Fill battlefield slot 1, 2 or 3. A null cardId clears the slot."""
    deck = await deck_service.set_battlefield(
        session, catalog, deck_id, owner_id, position, request.card_id
    )
    return deck_to_response(deck)


# --- Main / rune sections ---


@router.post("/{deck_id}/{section}", response_model=DeckResponse)
async def add_card(
    deck_id: str,
    section: DeckSection,
    request: AddCardRequest,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> DeckResponse:
    """Add copies of a card to the main or rune deck."""
    deck = await deck_service.add_card(
        session, catalog, deck_id, owner_id, section, request.card_id, request.quantity
    )
    return deck_to_response(deck)


@router.patch("/{deck_id}/{section}/{card_id}", response_model=DeckResponse)
async def set_card_quantity(
    deck_id: str,
    section: DeckSection,
    card_id: str,
    request: QuantityRequest,
    session: Session,
    catalog: Catalog,
    owner_id: OwnerId,
) -> DeckResponse:
    """Set the copies of a card in the main or rune deck."""
    deck = await deck_service.set_card_quantity(
        session, catalog, deck_id, owner_id, section, card_id, request.quantity
    )
    return deck_to_response(deck)


@router.delete("/{deck_id}/{section}/{card_id}", response_model=DeckResponse)
async def remove_card(
    deck_id: str,
    section: DeckSection,
    card_id: str,
    session: Session,
    owner_id: OwnerId,
) -> DeckResponse:
    """Remove a card from the main or rune deck."""
    deck = await deck_service.remove_card(session, deck_id, owner_id, section, card_id)
    return deck_to_response(deck)
