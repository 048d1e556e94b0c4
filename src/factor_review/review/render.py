"""
Plain-text rendering of the review table and factor matcher.

Used by the CLI. Only the materialized window of the table is drawn.
"""

from __future__ import annotations

from decimal import Decimal

from ..confidence import ConfidenceBadge, ConfidenceTier
from ..matching import FactorMatcher
from ..schemas import LineItem
from .table import EMPTY_MESSAGE, EMPTY_TITLE, ReviewTable

PLACEHOLDER = "—"

TIER_SYMBOLS = {
    ConfidenceTier.HIGH: "✓",
    ConfidenceTier.MEDIUM: "⚠",
    ConfidenceTier.LOW: "✗",
}

TABLE_SHORTCUTS = "Keyboard shortcuts: j next, k previous, Space select, Enter approve"
MATCHER_SHORTCUTS = "↑↓ navigate, Enter select, Esc close"


def truncate(text: str, width: int) -> str:
    """Cut text to ``width`` characters, marking the cut with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: max(0, width - 1)] + "…"


def format_quantity(item: LineItem) -> str:
    """'1,250 therms'."""
    quantity = item.quantity
    if isinstance(quantity, Decimal) and quantity == quantity.to_integral_value():
        quantity = quantity.quantize(Decimal(1))
    text = f"{quantity:,}"
    return f"{text} {item.unit}".strip()


def render_badge(badge: ConfidenceBadge) -> str:
    return f"{TIER_SYMBOLS[badge.tier]} {badge.text}"


def render_table(table: ReviewTable) -> str:
    """Draw the batch toolbar, the visible rows and the footer."""
    if table.is_loading:
        return "Loading line items..."
    if table.is_empty:
        return f"✓ {EMPTY_TITLE}\n  {EMPTY_MESSAGE}"

    lines: list[str] = []

    label = table.selection_label
    if label:
        lines.append(f"[{label}]  Approve Selected | Reject Selected")
        lines.append("")

    check_all = "[x]" if table.all_selected else "[ ]"
    lines.append(
        f"  {check_all} {'DESCRIPTION':<32} {'QUANTITY':>16}  {'FACTOR':<36} CONFIDENCE"
    )
    lines.append("  " + "-" * 100)

    rows = table.visible_rows()
    for row in rows:
        cursor = ">" if row.is_focused else " "
        check = "[x]" if row.is_selected else "[ ]"
        description = truncate(row.item.description or PLACEHOLDER, 32)
        factor = truncate(row.factor.name, 36)
        lines.append(
            f"{cursor} {check} {description:<32} {format_quantity(row.item):>16}  "
            f"{factor:<36} {render_badge(row.badge)}"
        )
        meta = [row.item.vendor or PLACEHOLDER, row.item.date or PLACEHOLDER]
        lines.append(f"        {' · '.join(meta)}")

    count = len(table.items)
    lines.append("")
    lines.append(
        f"Rows {rows[0].index + 1}-{rows[-1].index + 1} of {count} "
        f"(scroll {table.scroll_offset:.0f}/{table.window.max_scroll:.0f}px)"
    )
    if table.pending_count:
        lines.append(f"Pending intents: {table.pending_count}")
    lines.append(TABLE_SHORTCUTS)
    return "\n".join(lines)


def render_matcher(matcher: FactorMatcher, now=None) -> str:
    """Draw the search box, status line and ranked result cards."""
    lines = [f"🔍 {matcher.query or matcher.placeholder}"]

    status = matcher.status_text
    if status:
        lines.append(f"   {status}")
    lines.append("")

    if matcher.is_loading:
        if not status:
            lines.append("   Searching...")
        return "\n".join(lines)

    if matcher.empty_message:
        lines.append(f"   {matcher.empty_message}")
        return "\n".join(lines)

    for card in matcher.cards(now=now):
        cursor = "▶" if card.is_highlighted else " "
        lines.append(f"{cursor} {card.factor.name}  {render_badge(card.badge)}")
        if card.factor.category:
            lines.append(f"    {card.factor.category}")
        trail = [card.usage_label] if card.usage_label else []
        if card.last_used_label:
            trail.append(f"Last: {card.last_used_label}")
        if trail:
            lines.append(f"    {' · '.join(trail)}")
        if card.value_label:
            lines.append(f"    {card.value_label}")
        if card.is_tooltip_open:
            lines.append(f"    Why this factor? {card.explanation}")

    lines.append("")
    lines.append(MATCHER_SHORTCUTS)
    return "\n".join(lines)
