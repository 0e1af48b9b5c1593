"""
Card lookup endpoints.

Read-only access to the card catalog used by deck building: single card
lookup and type/subtype listings for the legend, champion, rune and
battlefield pickers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from riftforge.models.card import Card, CardType
from riftforge.services.card_catalog import CardCatalog, get_card_catalog

router = APIRouter(prefix="/cards", tags=["cards"])

Catalog = Annotated[CardCatalog, Depends(get_card_catalog)]


class CardResponse(BaseModel):
    """Response model for a single card."""

    uuid: str
    name: str
    type: CardType
    domains: list[str] = Field(default_factory=list)
    subtypes: list[str] = Field(default_factory=list)
    supertypes: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    unique: bool = False


class CardListResponse(BaseModel):
    """Response model for a card listing."""

    items: list[CardResponse]
    totalCount: int  # noqa: N815 - matches the card API's field name


def card_to_response(card: Card) -> CardResponse:
    return CardResponse(
        uuid=card.card_id,
        name=card.name,
        type=card.type,
        domains=list(card.domains),
        subtypes=list(card.subtypes),
        supertypes=list(card.supertypes),
        attributes=list(card.attributes),
        unique=card.is_unique,
    )


@router.get("", response_model=CardListResponse)
async def list_cards(
    catalog: Catalog,
    card_type: Annotated[CardType | None, Query(alias="type")] = None,
    subtype: str | None = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CardListResponse:
    """
    List catalog cards, optionally filtered by type and subtype.

    `?type=champion&subtype=<legend subtype>` lists champions that fit a legend.
    """
    matches = catalog.search(card_type=card_type, subtype=subtype)
    page = matches[offset : offset + limit]
    return CardListResponse(
        items=[card_to_response(card) for card in page],
        totalCount=len(matches),
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, catalog: Catalog) -> CardResponse:
    """
    Get one card by id.

    Returns 404 if the card is not in the catalog.
    """
    return card_to_response(catalog.get(card_id))
