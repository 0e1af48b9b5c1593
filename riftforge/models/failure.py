"""
Failure Explanation Envelope: unified response classification.

This module defines the response envelope that ALL API endpoints use to
communicate outcomes to the web client, and the exception taxonomy for
every failure the deck builder can report.

INVARIANT: No raw 500 errors may reach the client.

Response types:
- Success: Operation completed successfully
- Refusal: A deck rule rejected the mutation (expected, explainable)
- KnownFailure: System knows why it failed (missing deck, missing card, conflict)
- UnknownFailure: System does not know why it failed

AUTHORITY BOUNDARY:
All user-visible failure responses pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Deck rule violations
    INVALID_CARD_TYPE = "invalid_card_type"
    MISSING_PREREQUISITE = "missing_prerequisite"
    INCOMPATIBLE_CHAMPION = "incompatible_champion"
    INVALID_POSITION = "invalid_position"
    SECTION_FULL = "section_full"
    COPY_LIMIT_EXCEEDED = "copy_limit_exceeded"
    INVALID_QUANTITY = "invalid_quantity"

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    CARD_NOT_FOUND = "card_not_found"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


# Default message per failure kind. Messages are fixed per kind.
# Specifics of a single failure go in FailureDetail.detail.
KIND_MESSAGES: dict[FailureKind, str] = {
    FailureKind.INVALID_CARD_TYPE: "That card type cannot be placed there.",
    FailureKind.MISSING_PREREQUISITE: "Choose a legend before choosing a champion.",
    FailureKind.INCOMPATIBLE_CHAMPION: "That champion does not match the deck's legend.",
    FailureKind.INVALID_POSITION: "Battlefield position must be 1, 2 or 3.",
    FailureKind.SECTION_FULL: "That deck section is full.",
    FailureKind.COPY_LIMIT_EXCEEDED: "The deck already has the maximum copies of that card.",
    FailureKind.INVALID_QUANTITY: "Quantity is out of range.",
    FailureKind.INVALID_INPUT: "The request is invalid.",
    FailureKind.CARD_NOT_FOUND: "Card not found.",
    FailureKind.NOT_FOUND: "Deck not found.",
    FailureKind.CONFLICT: "The deck was changed by another request. Reload and try again.",
    FailureKind.UNKNOWN: "I failed and I don't know why. Try simplifying the request or retrying.",
}


STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "Please modify your request to satisfy the deck rules.",
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


T = TypeVar("T")


class FailureDetail(BaseModel):
    """What went wrong, in words the web client can show as-is."""

    kind: FailureKind
    message: str = Field(..., description="Stable, human-readable message for the kind")
    detail: str | None = Field(default=None, description="Specifics of this failure")
    suggestion: str | None = Field(default=None, description="What the user can do next")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for classified results.

    Exactly one of `data` (success) or `failure` (every other outcome)
    is populated.
    """

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def failed(
        cls,
        outcome: OutcomeType,
        kind: FailureKind,
        message: str | None = None,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Non-success response; `message` defaults to the kind's message."""
        failure = FailureDetail(
            kind=kind,
            message=message or KIND_MESSAGES[kind],
            detail=detail,
            suggestion=suggestion,
        )
        return cls(outcome=outcome, failure=failure)

    @classmethod
    def refusal(
        cls,
        kind: FailureKind,
        message: str | None = None,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """A deck rule rejected the requested change."""
        return cls.failed(OutcomeType.REFUSAL, kind, message, detail, suggestion)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str | None = None,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """The request failed for a known reason, e.g. a missing deck or card."""
        return cls.failed(OutcomeType.KNOWN_FAILURE, kind, message, detail, suggestion)

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        """
        The request failed and the cause was not classified.

        NOTE: Prefer create_unknown_failure() which auto-finalizes.
        """
        return cls.failed(
            OutcomeType.UNKNOWN_FAILURE,
            FailureKind.UNKNOWN,
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        )


class ClassifiedError(Exception):
    """
    Base for exceptions that map onto a failure envelope.

    Subclasses set `outcome` and the default HTTP status. The message
    defaults to the stable message for `kind`.
    """

    outcome: OutcomeType = OutcomeType.KNOWN_FAILURE
    default_status_code: int = 400

    def __init__(
        self,
        kind: FailureKind,
        message: str | None = None,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int | None = None,
    ):
        self.kind = kind
        self.message = message or KIND_MESSAGES[kind]
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)

    def to_response(self) -> ApiResponse[Any]:
        return ApiResponse.failed(
            self.outcome, self.kind, self.message, self.detail, self.suggestion
        )


class KnownError(ClassifiedError):
    """The system knows exactly why the request failed."""


class RefusalError(ClassifiedError):
    """The system refuses to proceed because a rule would be broken."""

    outcome = OutcomeType.REFUSAL
    default_status_code = 422


# =============================================================================
# DECK RULE VIOLATIONS
# =============================================================================


class DeckRuleError(RefusalError):
    """
    A deck mutation was rejected by a construction rule.

    The deck is left exactly as it was before the attempt.
    """

    def __init__(self, kind: FailureKind, detail: str, status_code: int | None = None):
        super().__init__(kind, detail=detail, status_code=status_code)


class InvalidCardTypeError(DeckRuleError):
    """Card type is not accepted by the targeted deck slot or section."""

    def __init__(self, card_id: str, card_type: str, expected: str):
        self.card_id = card_id
        self.card_type = card_type
        self.expected = expected
        super().__init__(
            FailureKind.INVALID_CARD_TYPE,
            f"Card '{card_id}' is of type {card_type}; expected {expected}.",
        )


class MissingPrerequisiteError(DeckRuleError):
    """A champion was chosen before the legend."""

    def __init__(self) -> None:
        super().__init__(
            FailureKind.MISSING_PREREQUISITE,
            "No legend is set on this deck.",
            status_code=409,
        )


class IncompatibleChampionError(DeckRuleError):
    """Champion shares no subtype with the deck's legend."""

    def __init__(self, champion_id: str, legend_id: str):
        self.champion_id = champion_id
        self.legend_id = legend_id
        super().__init__(
            FailureKind.INCOMPATIBLE_CHAMPION,
            f"Champion '{champion_id}' shares no subtype with legend '{legend_id}'.",
        )


class InvalidPositionError(DeckRuleError):
    """Battlefield position outside the fixed slots."""

    def __init__(self, position: int):
        self.position = position
        super().__init__(
            FailureKind.INVALID_POSITION,
            f"Battlefield position {position} does not exist.",
        )


class SectionFullError(DeckRuleError):
    """Change would push a section past its card ceiling."""

    def __init__(self, section: str, limit: int, resulting: int):
        self.section = section
        self.limit = limit
        self.resulting = resulting
        super().__init__(
            FailureKind.SECTION_FULL,
            f"{section.capitalize()} deck would hold {resulting} cards (limit {limit}).",
            status_code=409,
        )


class CopyLimitExceededError(DeckRuleError):
    """Change would exceed the copy limit for one card."""

    def __init__(self, card_id: str, limit: int, resulting: int):
        self.card_id = card_id
        self.limit = limit
        self.resulting = resulting
        super().__init__(
            FailureKind.COPY_LIMIT_EXCEEDED,
            f"Card '{card_id}' would have {resulting} copies (limit {limit}).",
            status_code=409,
        )


class InvalidQuantityError(DeckRuleError):
    """Quantity or delta out of its allowed range."""

    def __init__(self, quantity: int, minimum: int):
        self.quantity = quantity
        self.minimum = minimum
        super().__init__(
            FailureKind.INVALID_QUANTITY,
            f"Quantity {quantity} is below the minimum of {minimum}.",
        )


# =============================================================================
# RESOURCE FAILURES
# =============================================================================


class CardNotFoundError(KnownError):
    """Card id is unknown to the card catalog."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.CARD_NOT_FOUND,
            detail=f"No card with id '{card_id}'.",
            status_code=404,
        )


class DeckNotFoundError(KnownError):
    """Deck does not exist (or belongs to another user)."""

    def __init__(self, deck_id: str):
        self.deck_id = deck_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            detail=f"No deck with id '{deck_id}'.",
            status_code=404,
        )


class DeckConflictError(KnownError):
    """Deck was saved by someone else since it was loaded."""

    def __init__(self, deck_id: str, expected_version: int):
        self.deck_id = deck_id
        self.expected_version = expected_version
        super().__init__(
            kind=FailureKind.CONFLICT,
            detail=f"Deck '{deck_id}' is no longer at version {expected_version}.",
            suggestion="Reload the deck and repeat the change.",
            status_code=409,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All user-visible failure responses MUST pass through this boundary.
#
# =============================================================================


# Track finalized responses (weak reference would be ideal, but set is simpler)
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Every response that passes through this function is guaranteed to:
    1. Have a valid outcome classification
    2. Have failure details if not successful
    3. Carry a suggestion if not successful

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")
        if response.failure.suggestion is None:
            response.failure.suggestion = STANDARD_SUGGESTIONS[response.outcome]

    _finalized_responses.add(id(response))

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """
    Check if a response has passed through the authority boundary.

    This is used by tests to verify that no handler bypasses the boundary.
    """
    return id(response) in _finalized_responses


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = type(exception).__name__ if include_type else None
    return finalize_response(ApiResponse.unknown_failure(detail=detail))


def create_failure(error: ClassifiedError) -> ApiResponse[Any]:
    """Create a finalized response from a classified exception."""
    return finalize_response(error.to_response())


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
