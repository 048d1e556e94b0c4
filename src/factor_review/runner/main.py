"""
CLI main entry point.
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from ..config import Config, ConfigValidationError, Density, create_default_config, load_config
from ..confidence import ConfidenceScorer
from ..matching import FactorMatcher, ManualScheduler
from ..review import ReviewTable
from ..review.render import render_badge, render_matcher, render_table
from ..schemas import SchemaError, load_factors, load_line_items

logger = logging.getLogger(__name__)

# Simulated delay between typed characters in `search`
KEYSTROKE_INTERVAL_S = 0.05

KEY_NAMES = {
    "j": ReviewTable.KEY_NEXT,
    "k": ReviewTable.KEY_PREV,
    "space": ReviewTable.KEY_TOGGLE,
    "enter": ReviewTable.KEY_APPROVE,
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="factor-review",
        description="Review emission factor matches for line items",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("factor_review.yaml"),
        help="Path to config file (default: factor_review.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # review command
    review_parser = subparsers.add_parser("review", help="Show the review table window")
    review_parser.add_argument("items", type=Path, help="Line items file (JSON or YAML)")
    review_parser.add_argument(
        "--scroll",
        type=float,
        default=0.0,
        help="Scroll offset in pixels (default: 0)",
    )
    review_parser.add_argument(
        "--focus",
        type=int,
        default=None,
        help="Focus row index and scroll it into view",
    )
    review_parser.add_argument(
        "--select",
        type=str,
        default="",
        help="Comma-separated item ids to select",
    )
    review_parser.add_argument(
        "--keys",
        type=str,
        default="",
        help="Comma-separated key presses to replay: j, k, space, enter",
    )
    review_parser.add_argument(
        "--density",
        choices=[d.value for d in Density],
        default=None,
        help="Row density (overrides config)",
    )
    review_parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Viewport height in pixels (overrides config)",
    )

    # search command
    search_parser = subparsers.add_parser("search", help="Search an emission factor catalog")
    search_parser.add_argument("factors", type=Path, help="Factor catalog file (JSON or YAML)")
    search_parser.add_argument(
        "-q",
        "--query",
        type=str,
        default="",
        help="Search query, typed one character at a time",
    )
    search_parser.add_argument(
        "--down",
        type=int,
        default=0,
        help="Move the result cursor down N times",
    )
    search_parser.add_argument(
        "--explain",
        type=str,
        default=None,
        help="Factor id whose explanation to show",
    )

    # tier command
    tier_parser = subparsers.add_parser("tier", help="Show confidence tier for scores")
    tier_parser.add_argument("scores", type=float, nargs="+", help="Confidence scores")

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Target path (default: the --config path)",
    )

    return parser


def _print_intent(kind: str):
    def emit(*args) -> None:
        print(f"  → {kind}: {', '.join(str(a) for a in args)}")

    return emit


def cmd_review(
    config: Config,
    items_path: Path,
    scroll: float = 0.0,
    focus: int | None = None,
    select: str = "",
    keys: str = "",
) -> int:
    """Render the visible window of the review table."""
    items = load_line_items(items_path)

    table = ReviewTable(
        items,
        on_approve=_print_intent("approve"),
        on_reject=_print_intent("reject"),
        on_factor_change=_print_intent("factor changed"),
        on_batch_approve=_print_intent("batch approve"),
        on_batch_reject=_print_intent("batch reject"),
        config=config.table,
    )

    table.scroll_to(scroll)
    if focus is not None:
        table.selection.set_focus(focus)
        table.scroll_to_index(table.focused_index)

    for item_id in filter(None, (s.strip() for s in select.split(","))):
        table.toggle_select(item_id)

    for name in filter(None, (s.strip().lower() for s in keys.split(","))):
        key = KEY_NAMES.get(name)
        if key is None:
            print(f"❌ Unknown key: {name}")
            return 1
        table.handle_key(key)

    print(render_table(table))
    return 0


def cmd_search(
    config: Config,
    factors_path: Path,
    query: str = "",
    down: int = 0,
    explain: str | None = None,
) -> int:
    """Run a search over a factor catalog and print the ranked results."""
    factors = load_factors(factors_path)
    scheduler = ManualScheduler()
    matcher = FactorMatcher(factors, scheduler=scheduler, config=config.matcher)

    typed = ""
    for char in query:
        typed += char
        matcher.set_query(typed)
        scheduler.advance(KEYSTROKE_INTERVAL_S)
    scheduler.advance(config.matcher.debounce_ms / 1000.0)

    for _ in range(down):
        matcher.handle_key(FactorMatcher.KEY_DOWN)
    if explain:
        matcher.show_tooltip(explain)

    print(render_matcher(matcher))
    return 0


def cmd_tier(scores: list[float]) -> int:
    """Print the confidence tier of each score."""
    scorer = ConfidenceScorer()
    for score in scores:
        badge = scorer.badge(score)
        print(f"  {render_badge(badge):<10} {badge.tier.value:<8} {badge.a11y_label}")
    return 0


def cmd_init_config(path: Path) -> int:
    """Write a default config file."""
    if path.exists():
        print(f"❌ Config already exists: {path}")
        return 1
    create_default_config(path)
    print(f"✓ Wrote default config to {path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.path or parsed.config)
    if parsed.command == "tier":
        return cmd_tier(parsed.scores)

    # Load config
    try:
        config = load_config(parsed.config)
    except (ConfigValidationError, OSError, yaml.YAMLError) as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    try:
        if parsed.command == "review":
            if parsed.density:
                config.table.density = Density(parsed.density)
            if parsed.height is not None:
                config.table.container_height = parsed.height
            errors = config.validate()
            if errors:
                print(f"❌ Invalid settings: {'; '.join(errors)}")
                return 1
            return cmd_review(
                config,
                parsed.items,
                scroll=parsed.scroll,
                focus=parsed.focus,
                select=parsed.select,
                keys=parsed.keys,
            )
        elif parsed.command == "search":
            return cmd_search(
                config,
                parsed.factors,
                query=parsed.query,
                down=parsed.down,
                explain=parsed.explain,
            )
    except (SchemaError, ValueError, OSError, yaml.YAMLError) as e:
        logger.debug("Input error", exc_info=True)
        print(f"❌ Failed to read input: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
