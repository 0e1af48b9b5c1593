from riftforge.models.card import NON_MAIN_TYPES, Card, CardType
from riftforge.models.deck import (
    DEFAULT_DECK_NAME,
    DEFAULT_RULES,
    DeckAggregate,
    DeckLineItem,
    DeckRules,
    DeckSection,
    DeckStep,
    NextStep,
)
from riftforge.models.failure import (
    KIND_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    CardNotFoundError,
    ClassifiedError,
    CopyLimitExceededError,
    DeckConflictError,
    DeckNotFoundError,
    DeckRuleError,
    FailureDetail,
    FailureKind,
    IncompatibleChampionError,
    InvalidCardTypeError,
    InvalidPositionError,
    InvalidQuantityError,
    KnownError,
    MissingPrerequisiteError,
    OutcomeType,
    RefusalError,
    SectionFullError,
    create_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from riftforge.models.validation import DeckValidationReport

__all__ = [
    "ApiResponse",
    "Card",
    "CardNotFoundError",
    "CardType",
    "ClassifiedError",
    "CopyLimitExceededError",
    "DEFAULT_DECK_NAME",
    "DEFAULT_RULES",
    "DeckAggregate",
    "DeckConflictError",
    "DeckLineItem",
    "DeckNotFoundError",
    "DeckRuleError",
    "DeckRules",
    "DeckSection",
    "DeckStep",
    "DeckValidationReport",
    "FailureDetail",
    "FailureKind",
    "IncompatibleChampionError",
    "InvalidCardTypeError",
    "InvalidPositionError",
    "InvalidQuantityError",
    "KIND_MESSAGES",
    "KnownError",
    "MissingPrerequisiteError",
    "NON_MAIN_TYPES",
    "NextStep",
    "OutcomeType",
    "RefusalError",
    "STANDARD_SUGGESTIONS",
    "SectionFullError",
    "create_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
