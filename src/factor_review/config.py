"""
Configuration management (SSOT).

All configuration keys for the review table and the factor matcher are
defined here; no other module should invent config keys.

Key invariants:
- Overscan defaults to 5 rows and the search debounce to 300ms
- Row height estimates are fixed per density
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


class Density(str, Enum):
    """Row density of the review table."""

    COMPACT = "compact"
    COMFORTABLE = "comfortable"
    SPACIOUS = "spacious"


# Estimated row height in pixels per density
ROW_HEIGHT_ESTIMATES = {
    Density.COMPACT: 48,
    Density.COMFORTABLE: 64,
    Density.SPACIOUS: 80,
}


class OverridePolicy(str, Enum):
    """What happens to factor overrides when the item collection is replaced.

    RESET: rebuild every choice from the suggested factors
    PRESERVE: keep overrides for ids present in both collections
    """

    RESET = "reset"
    PRESERVE = "preserve"


@dataclass
class TableConfig:
    """Review table settings."""

    density: Density = Density.COMFORTABLE
    # Viewport height in pixels
    container_height: int = 600
    # Extra rows rendered beyond each viewport edge
    overscan: int = 5
    override_policy: OverridePolicy = OverridePolicy.RESET

    @property
    def row_height(self) -> int:
        """Estimated row height for the configured density."""
        return ROW_HEIGHT_ESTIMATES[self.density]


@dataclass
class MatcherConfig:
    """Factor matcher settings."""

    # Trailing-edge quiet period before a query is applied
    debounce_ms: int = 300
    show_audit_trail: bool = True
    show_explanation: bool = True
    placeholder: str = "Search emission factors..."


@dataclass
class Config:
    """Application configuration (SSOT)."""

    table: TableConfig = field(default_factory=TableConfig)
    matcher: MatcherConfig = field(default_factory=MatcherConfig)

    def validate(self) -> list[str]:
        """Validate configuration consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if self.table.container_height <= 0:
            errors.append("table.container_height must be positive")
        if self.table.overscan < 0:
            errors.append("table.overscan must not be negative")
        if self.matcher.debounce_ms < 0:
            errors.append("matcher.debounce_ms must not be negative")

        return errors


def _parse_enum(enum_cls, value, key: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigValidationError(f"{key} must be one of: {allowed} (got {value!r})") from None


def _parse_int(value, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigValidationError(f"{key} must be an integer (got {value!r})") from None


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    A missing file yields defaults. Environment variables override file
    values:
    - FACTOR_REVIEW_DENSITY (compact/comfortable/spacious)
    - FACTOR_REVIEW_CONTAINER_HEIGHT (pixels)
    - FACTOR_REVIEW_OVERSCAN (rows)
    - FACTOR_REVIEW_DEBOUNCE_MS (milliseconds)
    - FACTOR_REVIEW_OVERRIDE_POLICY (reset/preserve)

    Raises:
        ConfigValidationError: If a value cannot be parsed or fails validation
    """
    config_path = Path(config_path)
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Table config
    table_data = data.get("table", {}) or {}
    table = TableConfig(
        density=_parse_enum(
            Density,
            os.environ.get("FACTOR_REVIEW_DENSITY", table_data.get("density", "comfortable")),
            "table.density",
        ),
        container_height=_parse_int(
            os.environ.get(
                "FACTOR_REVIEW_CONTAINER_HEIGHT", table_data.get("container_height", 600)
            ),
            "table.container_height",
        ),
        overscan=_parse_int(
            os.environ.get("FACTOR_REVIEW_OVERSCAN", table_data.get("overscan", 5)),
            "table.overscan",
        ),
        override_policy=_parse_enum(
            OverridePolicy,
            os.environ.get(
                "FACTOR_REVIEW_OVERRIDE_POLICY", table_data.get("override_policy", "reset")
            ),
            "table.override_policy",
        ),
    )

    # Matcher config
    matcher_data = data.get("matcher", {}) or {}
    matcher = MatcherConfig(
        debounce_ms=_parse_int(
            os.environ.get("FACTOR_REVIEW_DEBOUNCE_MS", matcher_data.get("debounce_ms", 300)),
            "matcher.debounce_ms",
        ),
        show_audit_trail=matcher_data.get("show_audit_trail", True),
        show_explanation=matcher_data.get("show_explanation", True),
        placeholder=matcher_data.get("placeholder", "Search emission factors..."),
    )

    config = Config(table=table, matcher=matcher)

    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return config


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Factor review configuration
#
# Environment variables override these values:
#   FACTOR_REVIEW_DENSITY, FACTOR_REVIEW_CONTAINER_HEIGHT,
#   FACTOR_REVIEW_OVERSCAN, FACTOR_REVIEW_DEBOUNCE_MS,
#   FACTOR_REVIEW_OVERRIDE_POLICY

table:
  density: "comfortable"        # compact (48px) | comfortable (64px) | spacious (80px)
  container_height: 600         # Viewport height in pixels
  overscan: 5                   # Rows rendered beyond each viewport edge
  override_policy: "reset"      # reset | preserve factor overrides on refresh

matcher:
  debounce_ms: 300              # Quiet period before a search query is applied
  show_audit_trail: true        # Show usage count and last-used label
  show_explanation: true        # Show "Why this factor?" explanations
  placeholder: "Search emission factors..."
"""

    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
