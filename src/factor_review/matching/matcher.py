"""Factor matcher: debounced search over an emission factor catalog.

The operator types a query; after a 300ms quiet period the catalog is
filtered on name or category and ranked by confidence. Arrow keys move a
bounded cursor, Enter commits the highlighted factor and Escape clears.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from ..confidence import ConfidenceBadge, ConfidenceScorer
from ..schemas import EmissionFactor
from .audit_trail import format_relative_time, format_usage
from .debounce import Debouncer

if TYPE_CHECKING:
    from ..config import MatcherConfig
    from .debounce import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300


class EmptyState(str, Enum):
    """Why the result list is empty."""

    NO_QUERY = "no_query"
    NO_MATCHES = "no_matches"


EMPTY_STATE_MESSAGES = {
    EmptyState.NO_QUERY: "Start typing to search emission factors",
    EmptyState.NO_MATCHES: "No emission factors match your search",
}


@dataclass
class MatchCard:
    """One ranked search result, ready to display."""

    factor: EmissionFactor
    index: int
    is_highlighted: bool
    badge: ConfidenceBadge
    usage_label: Optional[str] = None
    last_used_label: Optional[str] = None
    value_label: Optional[str] = None
    explanation: Optional[str] = None
    is_tooltip_open: bool = False


def matches_query(factor: EmissionFactor, query: str) -> bool:
    """Case-insensitive substring match on name or category."""
    needle = query.lower()
    return needle in factor.name.lower() or needle in (factor.category or "").lower()


def rank_factors(factors: list[EmissionFactor], query: str = "") -> list[EmissionFactor]:
    """Filter by query (empty keeps all) and sort by confidence, highest first.

    ``sorted`` is stable, so ties keep catalog order.
    """
    filtered = [f for f in factors if matches_query(f, query)] if query else list(factors)
    return sorted(filtered, key=lambda f: f.confidence, reverse=True)


class FactorMatcher:
    """
    Search box state for picking an emission factor.

    Holds the raw query (updated on every keystroke), the debounced query
    (the one filtering actually uses), the ranked results, a cursor into
    them and at most one open explanation tooltip.
    """

    KEY_DOWN = "ArrowDown"
    KEY_UP = "ArrowUp"
    KEY_ENTER = "Enter"
    KEY_ESCAPE = "Escape"

    def __init__(
        self,
        factors: list[EmissionFactor],
        on_select: Optional[Callable[[EmissionFactor], None]] = None,
        on_query_change: Optional[Callable[[str], None]] = None,
        scheduler: Optional[Scheduler] = None,
        config: Optional[MatcherConfig] = None,
        scorer: Optional[ConfidenceScorer] = None,
    ) -> None:
        """Initialize the matcher.

        Args:
            factors: Candidate catalog.
            on_select: Called with the full factor record on commit.
            on_query_change: Called with the raw query on every change.
            scheduler: Debounce scheduler; the running asyncio loop if omitted,
                and no delay at all outside a loop.
            config: Matcher settings (debounce window, display toggles).
            scorer: Confidence scorer for result badges.
        """
        self.factors = list(factors)
        self.on_select = on_select
        self.on_query_change = on_query_change
        self.scorer = scorer or ConfidenceScorer()

        debounce_ms = config.debounce_ms if config else DEFAULT_DEBOUNCE_MS
        self.show_audit_trail = config.show_audit_trail if config else True
        self.show_explanation = config.show_explanation if config else True
        self.placeholder = config.placeholder if config else "Search emission factors..."

        self.query = ""
        self.debounced_query = ""
        self.cursor = 0
        self.open_tooltip: Optional[str] = None
        self.is_focused = False
        self.is_loading = False

        self._debouncer = Debouncer(debounce_ms, self._apply_query, scheduler)
        self.results: list[EmissionFactor] = rank_factors(self.factors)

    # -- query -------------------------------------------------------------

    def set_query(self, value: str) -> None:
        """Handle a keystroke: update the raw query and restart the debounce."""
        self.query = value
        self.cursor = 0
        self.is_focused = True
        if self.on_query_change:
            self.on_query_change(value)
        self._debouncer.trigger(value)

    def clear_query(self) -> None:
        """Empty the query at once; a pending debounce is dropped."""
        self._debouncer.cancel()
        self.query = ""
        self.cursor = 0
        if self.on_query_change:
            self.on_query_change("")
        self._apply_query("")

    def set_factors(self, factors: list[EmissionFactor]) -> None:
        """Replace the catalog and re-rank against the debounced query."""
        self.factors = list(factors)
        self._refresh()

    def _apply_query(self, value: str) -> None:
        self.debounced_query = value
        self._refresh()

    def _refresh(self) -> None:
        self.results = rank_factors(self.factors, self.debounced_query)
        if self.results:
            self.cursor = min(self.cursor, len(self.results) - 1)
        else:
            self.cursor = 0
        ids = {f.id for f in self.results}
        if self.open_tooltip not in ids:
            self.open_tooltip = None
        logger.debug(f"Query {self.debounced_query!r} matched {len(self.results)} factor(s)")

    @property
    def is_search_pending(self) -> bool:
        """True while a keystroke has not yet settled."""
        return self._debouncer.is_pending

    # -- keyboard ----------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Dispatch a key press. Returns True if the key was handled."""
        if not self.results:
            return False

        if key == self.KEY_DOWN:
            self.move_cursor(1)
        elif key == self.KEY_UP:
            self.move_cursor(-1)
        elif key == self.KEY_ENTER:
            self.commit()
        elif key == self.KEY_ESCAPE:
            self.escape()
        else:
            return False
        return True

    def move_cursor(self, step: int) -> None:
        """Move the cursor, clamped to the result list."""
        if not self.results:
            return
        self.cursor = max(0, min(self.cursor + step, len(self.results) - 1))

    @property
    def highlighted(self) -> Optional[EmissionFactor]:
        if 0 <= self.cursor < len(self.results):
            return self.results[self.cursor]
        return None

    def commit(self) -> Optional[EmissionFactor]:
        """Select the highlighted factor, then clear the query."""
        factor = self.highlighted
        if factor is None:
            return None
        self.select(factor)
        return factor

    def select(self, factor: EmissionFactor) -> None:
        """Select a factor directly (a click on a result)."""
        logger.debug(f"Factor selected: {factor.id}")
        if self.on_select:
            self.on_select(factor)
        self.clear_query()
        self.is_focused = False

    def escape(self) -> None:
        """Clear the query and drop focus."""
        self.clear_query()
        self.is_focused = False

    # -- tooltip -----------------------------------------------------------

    def show_tooltip(self, factor_id: str) -> None:
        """Open the explanation of one factor, closing any other."""
        self.open_tooltip = factor_id

    def hide_tooltip(self) -> None:
        self.open_tooltip = None

    def toggle_tooltip(self, factor_id: str) -> None:
        if self.open_tooltip == factor_id:
            self.open_tooltip = None
        else:
            self.open_tooltip = factor_id

    # -- presentation ------------------------------------------------------

    @property
    def empty_state(self) -> Optional[EmptyState]:
        """Which empty presentation applies, or None when there are results."""
        if self.results or self.is_loading:
            return None
        return EmptyState.NO_MATCHES if self.debounced_query else EmptyState.NO_QUERY

    @property
    def empty_message(self) -> Optional[str]:
        state = self.empty_state
        return EMPTY_STATE_MESSAGES[state] if state else None

    @property
    def status_text(self) -> Optional[str]:
        """Result count line shown under an active query."""
        if not self.debounced_query:
            return None
        if self.is_loading:
            return "Searching..."
        count = len(self.results)
        return f"{count} result{'s' if count != 1 else ''} found"

    def cards(self, now=None) -> list[MatchCard]:
        """Build display cards for the ranked results.

        Args:
            now: Reference time for relative audit labels (defaults to now).
        """
        cards = []
        for index, factor in enumerate(self.results):
            card = MatchCard(
                factor=factor,
                index=index,
                is_highlighted=index == self.cursor,
                badge=self.scorer.badge(factor.confidence),
                value_label=format_factor_value(factor),
            )
            if self.show_audit_trail:
                card.usage_label = format_usage(factor.usage_count)
                if factor.last_used:
                    card.last_used_label = format_relative_time(factor.last_used, now)
            if self.show_explanation and factor.explanation:
                card.explanation = factor.explanation
                card.is_tooltip_open = self.open_tooltip == factor.id
            cards.append(card)
        return cards


def format_factor_value(factor: EmissionFactor) -> Optional[str]:
    """'0.0053 kg CO2e per therm', or None without a numeric factor."""
    if factor.factor is None:
        return None
    text = f"{factor.factor:g} kg CO2e"
    if factor.unit:
        text += f" per {factor.unit}"
    return text
