"""
Canonical line item and emission factor records.

Every component works on these records. Input files and callers map
into them via ``from_dict``; the camelCase keys of the operator UI API
(``suggestedFactor``, ``usageCount`` ...) are accepted alongside
snake_case.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, Union

import yaml


class SchemaError(ValueError):
    """Raised when input data is structurally invalid."""

    pass


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key among camelCase/snake_case variants."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: dict, key: str, kind: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise SchemaError(f"{kind} is missing required field '{key}'")
    return value


@dataclass
class EmissionFactor:
    """A named conversion record proposed as the classification of a line item."""

    id: str
    name: str
    confidence: float  # Intended 0-100, not enforced
    category: str = ""
    unit: Optional[str] = None
    usage_count: Optional[int] = None
    last_used: Optional[Union[str, datetime]] = None
    explanation: Optional[str] = None
    factor: Optional[float] = None  # kg CO2e per unit

    def to_dict(self) -> dict:
        """Serialize using the operator UI key names."""
        last_used = self.last_used
        if isinstance(last_used, datetime):
            last_used = last_used.isoformat()
        return {
            "id": self.id,
            "name": self.name,
            "confidence": self.confidence,
            "category": self.category,
            "unit": self.unit,
            "usageCount": self.usage_count,
            "lastUsed": last_used,
            "explanation": self.explanation,
            "factor": self.factor,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EmissionFactor":
        """Deserialize from a dictionary."""
        if not isinstance(data, dict):
            raise SchemaError(f"Emission factor must be a mapping, got {type(data).__name__}")

        confidence = data.get("confidence", 0)
        try:
            confidence = float(confidence)
        except (TypeError, ValueError):
            raise SchemaError(
                f"Emission factor confidence is not numeric: {confidence!r}"
            ) from None

        usage_count = _pick(data, "usageCount", "usage_count")
        factor_value = data.get("factor")

        return cls(
            id=str(_require(data, "id", "Emission factor")),
            name=str(_require(data, "name", "Emission factor")),
            confidence=confidence,
            category=data.get("category") or "",
            unit=data.get("unit"),
            usage_count=int(usage_count) if usage_count is not None else None,
            last_used=_pick(data, "lastUsed", "last_used"),
            explanation=data.get("explanation"),
            factor=float(factor_value) if factor_value is not None else None,
        )


@dataclass
class LineItem:
    """A consumption record awaiting classification against an emission factor."""

    id: str
    description: str
    quantity: Decimal
    unit: str
    suggested_factor: EmissionFactor
    alternative_factors: list[EmissionFactor] = field(default_factory=list)
    date: Optional[str] = None  # ISO format YYYY-MM-DD
    vendor: Optional[str] = None

    @property
    def candidate_factors(self) -> list[EmissionFactor]:
        """Suggested factor followed by alternatives."""
        return [self.suggested_factor, *self.alternative_factors]

    def find_factor(self, factor_id: str) -> Optional[EmissionFactor]:
        """Look up a candidate factor by id."""
        for factor in self.candidate_factors:
            if factor.id == factor_id:
                return factor
        return None

    def to_dict(self) -> dict:
        """Serialize using the operator UI key names."""
        return {
            "id": self.id,
            "description": self.description,
            "quantity": str(self.quantity),
            "unit": self.unit,
            "date": self.date,
            "vendor": self.vendor,
            "suggestedFactor": self.suggested_factor.to_dict(),
            "alternativeFactors": [f.to_dict() for f in self.alternative_factors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Deserialize from a dictionary."""
        if not isinstance(data, dict):
            raise SchemaError(f"Line item must be a mapping, got {type(data).__name__}")

        item_id = str(_require(data, "id", "Line item"))

        suggested = _pick(data, "suggestedFactor", "suggested_factor")
        if suggested is None:
            raise SchemaError(f"Line item {item_id} has no suggested factor")

        raw_quantity = data.get("quantity", 0)
        try:
            quantity = Decimal(str(raw_quantity))
        except InvalidOperation:
            raise SchemaError(
                f"Line item {item_id} has invalid quantity: {raw_quantity!r}"
            ) from None

        alternatives = _pick(data, "alternativeFactors", "alternative_factors", default=[])

        return cls(
            id=item_id,
            description=data.get("description") or "",
            quantity=quantity,
            unit=data.get("unit") or "",
            suggested_factor=EmissionFactor.from_dict(suggested),
            alternative_factors=[EmissionFactor.from_dict(f) for f in alternatives],
            date=data.get("date"),
            vendor=data.get("vendor"),
        )


def _read_records(path: Path, list_key: str) -> list:
    """Read a JSON or YAML file holding a list, or a mapping with ``list_key``."""
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get(list_key, [])
    if not isinstance(data, list):
        raise SchemaError(f"{path}: expected a list of records under '{list_key}'")
    return data


def parse_line_items(records: list[dict]) -> list[LineItem]:
    """Build line items from raw records, rejecting duplicate ids."""
    items: list[LineItem] = []
    seen: set[str] = set()
    for record in records:
        item = LineItem.from_dict(record)
        if item.id in seen:
            raise SchemaError(f"Duplicate line item id: {item.id}")
        seen.add(item.id)
        items.append(item)
    return items


def load_line_items(path: Path) -> list[LineItem]:
    """Load line items from a JSON or YAML file."""
    return parse_line_items(_read_records(Path(path), "lineItems"))


def load_factors(path: Path) -> list[EmissionFactor]:
    """Load an emission factor catalog from a JSON or YAML file."""
    return [EmissionFactor.from_dict(r) for r in _read_records(Path(path), "factors")]
