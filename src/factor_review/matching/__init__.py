"""Factor search: debounced, confidence-ranked matching over a factor catalog."""

from factor_review.matching.audit_trail import (
    format_audit_trail,
    format_relative_time,
    format_usage,
)
from factor_review.matching.debounce import Debouncer, ManualScheduler
from factor_review.matching.matcher import (
    EmptyState,
    FactorMatcher,
    MatchCard,
    format_factor_value,
    matches_query,
    rank_factors,
)

__all__ = [
    "Debouncer",
    "EmptyState",
    "FactorMatcher",
    "ManualScheduler",
    "MatchCard",
    "format_audit_trail",
    "format_factor_value",
    "format_relative_time",
    "format_usage",
    "matches_query",
    "rank_factors",
]
