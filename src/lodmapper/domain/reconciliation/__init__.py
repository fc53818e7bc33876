"""Per-value reconciliation state, validation and search."""

from __future__ import annotations

from .batch import (
    SuggestFailure,
    SuggestSummary,
    check_url_reachability,
    confirm_link_backed,
    linked_entity_id,
    suggest_matches,
)
from .editor import Confirmed, ConfirmOutcome, Incomplete, ValueDraft, open_draft
from .kinds import value_kind_for
from .languages import search_languages
from .matching import constraint_factor, rank_matches, score_match
from .records import (
    IncompleteMatchError,
    InitializeSummary,
    InvalidTransitionError,
    ReconciliationStore,
    UnknownRecordError,
    default_confidence,
)
from .search import SearchField, SearchOutcome, SearchTicket
from .timevalues import ParsedTime, detect_precision, format_with_precision, parse_time
from .validators import (
    BUILTIN_ID_PATTERNS,
    UNREACHABLE_URL,
    UNSUPPORTED_DATATYPE,
    FormatCheck,
    ValidationIssue,
    ValidationReport,
    check_format,
    probe_url,
    validate,
)

__all__ = [
    "BUILTIN_ID_PATTERNS",
    "UNREACHABLE_URL",
    "UNSUPPORTED_DATATYPE",
    "ConfirmOutcome",
    "Confirmed",
    "FormatCheck",
    "Incomplete",
    "IncompleteMatchError",
    "InitializeSummary",
    "InvalidTransitionError",
    "ParsedTime",
    "ReconciliationStore",
    "SearchField",
    "SearchOutcome",
    "SearchTicket",
    "SuggestFailure",
    "SuggestSummary",
    "UnknownRecordError",
    "ValidationIssue",
    "ValidationReport",
    "ValueDraft",
    "check_format",
    "check_url_reachability",
    "confirm_link_backed",
    "constraint_factor",
    "default_confidence",
    "detect_precision",
    "format_with_precision",
    "linked_entity_id",
    "open_draft",
    "parse_time",
    "probe_url",
    "rank_matches",
    "score_match",
    "search_languages",
    "suggest_matches",
    "validate",
    "value_kind_for",
]
