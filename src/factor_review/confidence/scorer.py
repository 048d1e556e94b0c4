"""
Confidence tiering implementation.
"""

from dataclasses import dataclass
from enum import Enum


class ConfidenceTier(str, Enum):
    """
    Categorical bucket of a match confidence score.

    HIGH: score >= 80, safe to approve as suggested
    MEDIUM: 50 <= score < 80, operator should confirm
    LOW: score < 50, operator should pick another factor
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class TierPresentation:
    """Fixed visual treatment of a tier."""

    icon: str
    color: str
    label: str


@dataclass(frozen=True)
class ConfidenceBadge:
    """Everything needed to draw a confidence badge for one score."""

    score: float
    tier: ConfidenceTier
    icon: str
    color: str
    text: str  # e.g. "92%"
    a11y_label: str  # e.g. "High confidence: 92%"


class ConfidenceScorer:
    """
    Maps scores to tiers and badges.

    Boundaries are fixed. Scores outside 0-100 are not clamped; they
    resolve by the same rule (a score of -40 is LOW, 130 is HIGH).
    """

    HIGH_THRESHOLD = 80
    MEDIUM_THRESHOLD = 50

    PRESENTATION = {
        ConfidenceTier.HIGH: TierPresentation(icon="check-circle", color="success", label="High"),
        ConfidenceTier.MEDIUM: TierPresentation(
            icon="alert-triangle", color="warning", label="Medium"
        ),
        ConfidenceTier.LOW: TierPresentation(icon="x-circle", color="error", label="Low"),
    }

    def tier(self, score: float) -> ConfidenceTier:
        """Compute the tier of a score."""
        if score >= self.HIGH_THRESHOLD:
            return ConfidenceTier.HIGH
        elif score >= self.MEDIUM_THRESHOLD:
            return ConfidenceTier.MEDIUM
        else:
            return ConfidenceTier.LOW

    def presentation(self, tier: ConfidenceTier) -> TierPresentation:
        return self.PRESENTATION[tier]

    def a11y_label(self, score: float) -> str:
        """Accessible description, e.g. 'Medium confidence: 62%'."""
        label = self.PRESENTATION[self.tier(score)].label
        return f"{label} confidence: {format_score(score)}%"

    def badge(self, score: float) -> ConfidenceBadge:
        """Build the badge for a score."""
        tier = self.tier(score)
        look = self.PRESENTATION[tier]
        return ConfidenceBadge(
            score=score,
            tier=tier,
            icon=look.icon,
            color=look.color,
            text=f"{format_score(score)}%",
            a11y_label=f"{look.label} confidence: {format_score(score)}%",
        )


def format_score(score: float) -> str:
    """Render a score without a trailing '.0' for whole numbers."""
    if float(score).is_integer():
        return str(int(score))
    return f"{score:g}"


_default_scorer = ConfidenceScorer()


def tier(score: float) -> ConfidenceTier:
    """Module-level shortcut for ``ConfidenceScorer().tier``."""
    return _default_scorer.tier(score)
