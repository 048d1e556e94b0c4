"""
Confidence tiering module.

Buckets 0-100 match scores into high/medium/low tiers with a fixed
icon, colour and accessible label per tier.
"""

from .scorer import (
    ConfidenceBadge,
    ConfidenceScorer,
    ConfidenceTier,
    TierPresentation,
    format_score,
    tier,
)

__all__ = [
    "ConfidenceBadge",
    "ConfidenceScorer",
    "ConfidenceTier",
    "TierPresentation",
    "format_score",
    "tier",
]
