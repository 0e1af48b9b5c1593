"""
Card catalog service.

Loads and caches the card catalog and resolves card ids to Card objects.
The catalog is a JSON snapshot of the card API's `/cards` listing.
"""

import json
import logging
import re
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx

from riftforge.config import settings
from riftforge.models.card import Card, CardType
from riftforge.models.failure import CardNotFoundError

logger = logging.getLogger(__name__)

# Cards requested per page when downloading the catalog
PAGE_SIZE = 100

_DOMAIN_SEPARATORS = re.compile(r"[,;/|]")


class CardCatalog:
    """
    Read-only lookup of catalog cards by id.

    Example:
        >>> catalog = CardCatalog([card])
        >>> catalog.get(card.card_id).name
    """

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: dict[str, Card] = {card.card_id: card for card in cards}

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards.values())

    def get(self, card_id: str) -> Card:
        """
        Resolve a card id.

        Raises:
            CardNotFoundError: If the id is not in the catalog
        """
        card = self._cards.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def find(self, card_id: str) -> Card | None:
        """Resolve a card id, or None if unknown."""
        return self._cards.get(card_id)

    def search(self, card_type: CardType | None = None, subtype: str | None = None) -> list[Card]:
        """Cards of a type and/or subtype, sorted by name."""
        matches = [
            card
            for card in self._cards.values()
            if (card_type is None or card.type is card_type)
            and (subtype is None or subtype.lower() in card.subtype_set)
        ]
        return sorted(matches, key=lambda c: c.name)


def _tags(value: Any) -> tuple[str, ...]:
    """Normalise a tag field: list, dict keys, or delimited string."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts: Iterable[Any] = _DOMAIN_SEPARATORS.split(value)
    elif isinstance(value, dict):
        parts = [key for key, flag in value.items() if flag]
    else:
        parts = value
    tags: list[str] = []
    for part in parts:
        # Relation rows come back as {"name": ...} objects
        text = part.get("name", "") if isinstance(part, dict) else str(part)
        text = text.strip()
        if text and text not in tags:
            tags.append(text)
    return tuple(tags)


def _card_type(raw_type: Any, supertypes: tuple[str, ...]) -> CardType:
    if any(s.lower() == CardType.CHAMPION.value for s in supertypes):
        return CardType.CHAMPION
    try:
        return CardType(str(raw_type or "").strip().lower())
    except ValueError:
        return CardType.OTHER


def card_from_record(record: dict[str, Any]) -> Card:
    """
    Build a Card from a card API record.

    Accepts the loose shapes the API returns: `uuid` or `id`, type in any
    case, `domain` as a delimited string or `domains` as a list, attributes
    as a list or a dict of flags.

    Raises:
        ValueError: If the record has no identifier
    """
    card_id = record.get("uuid") or record.get("id")
    if not card_id:
        raise ValueError(f"Card record has no identifier: {record.get('name')!r}")

    supertypes = _tags(record.get("supertypes"))
    return Card(
        card_id=str(card_id),
        name=str(record.get("name") or card_id),
        type=_card_type(record.get("type"), supertypes),
        domains=_tags(record.get("domains", record.get("domain"))),
        subtypes=_tags(record.get("subtypes")),
        supertypes=supertypes,
        attributes=_tags(record.get("attributes")),
    )


def load_card_catalog(path: Path | None = None) -> CardCatalog:
    """
    Load the card catalog from a JSON file.

    The file holds either a list of card records or a `/cards` response
    body (`{"items": [...], "totalCount": n}`). Records without an id
    are skipped.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
    """
    if path is None:
        path = Path(settings.card_catalog_path)

    if not path.exists():
        raise FileNotFoundError(
            f"Card catalog not found at {path}. "
            "Run `python -m riftforge.jobs.download_catalog` first."
        )

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    records = data.get("items", []) if isinstance(data, dict) else data

    cards: list[Card] = []
    for record in records:
        try:
            cards.append(card_from_record(record))
        except ValueError as e:
            logger.warning("Skipping catalog record: %s", e)

    logger.info("Loaded %d cards from %s", len(cards), path)
    return CardCatalog(cards)


@lru_cache(maxsize=1)
def get_card_catalog() -> CardCatalog:
    """
    Get the cached card catalog.

    Cached after first load. Used as a FastAPI dependency.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
    """
    return load_card_catalog()


async def download_card_catalog(
    base_url: str | None = None,
    output_path: Path | None = None,
) -> Path:
    """
    Download every card from the card API into a JSON snapshot.

    Pages through `GET {base_url}/cards?limit=&offset=` until `totalCount`
    cards have been fetched. Without `totalCount`, paging stops at the first
    empty page.

    Returns:
        Path to the written file.

    Raises:
        httpx.HTTPError: If a page request fails
    """
    if base_url is None:
        base_url = settings.card_api_url
    if output_path is None:
        output_path = Path(settings.card_catalog_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[dict[str, Any]] = []
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        offset = 0
        while True:
            response = await client.get("/cards", params={"limit": PAGE_SIZE, "offset": offset})
            response.raise_for_status()
            body = response.json()

            items = body.get("items") or []
            records.extend(items)
            total = body.get("totalCount")
            logger.debug("Fetched %d cards (total %s)", len(records), total)

            offset += len(items)
            if not items or (total is not None and offset >= int(total)):
                break

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(records, f)

    return output_path
