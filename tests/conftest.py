"""Test fixtures and utilities."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from factor_review.matching import ManualScheduler
from factor_review.schemas import EmissionFactor, LineItem, parse_line_items

# Line items as the operator UI receives them
SAMPLE_LINE_ITEMS = [
    {
        "id": "1",
        "description": "Natural Gas - Building A HVAC",
        "quantity": 1250,
        "unit": "therms",
        "date": "2024-11-01",
        "vendor": "Commonwealth Gas",
        "suggestedFactor": {
            "id": "ef-ng-stat",
            "name": "Natural Gas - Stationary Combustion",
            "confidence": 92,
            "category": "Scope 1 - Direct Emissions",
        },
        "alternativeFactors": [
            {
                "id": "ef-ng-mobile",
                "name": "Natural Gas - Mobile Combustion",
                "confidence": 45,
                "category": "Scope 1 - Direct Emissions",
            }
        ],
    },
    {
        "id": "2",
        "description": "Electricity - Main Campus",
        "quantity": 45000,
        "unit": "kWh",
        "date": "2024-11-01",
        "vendor": "Xcel Energy",
        "suggestedFactor": {
            "id": "ef-elec-grid",
            "name": "Electricity - Grid Purchase (Colorado)",
            "confidence": 88,
            "category": "Scope 2 - Indirect Emissions",
        },
        "alternativeFactors": [
            {
                "id": "ef-elec-renewable",
                "name": "Electricity - Renewable Energy",
                "confidence": 35,
                "category": "Scope 2 - Indirect Emissions",
            }
        ],
    },
    {
        "id": "3",
        "description": "Medical Supplies - IV Sets",
        "quantity": 500,
        "unit": "units",
        "date": "2024-11-02",
        "vendor": "BD Medical",
        "suggestedFactor": {
            "id": "ef-med-plastic",
            "name": "Medical Supplies - Plastic Products",
            "confidence": 65,
            "category": "Scope 3 - Value Chain",
        },
        "alternativeFactors": [
            {
                "id": "ef-med-disposable",
                "name": "Medical Supplies - Disposable Equipment",
                "confidence": 58,
                "category": "Scope 3 - Value Chain",
            }
        ],
    },
    {
        "id": "4",
        "description": "Pharmaceuticals - Antibiotics",
        "quantity": 150,
        "unit": "kg",
        "date": "2024-11-03",
        "vendor": "Cardinal Health",
        "suggestedFactor": {
            "id": "ef-pharma-antibiotics",
            "name": "Pharmaceuticals - Antibiotics Manufacturing",
            "confidence": 38,
            "category": "Scope 3 - Value Chain",
        },
    },
]

# Factor catalog for search
SAMPLE_FACTORS = [
    {
        "id": "ef-1",
        "name": "Natural Gas - Stationary Combustion",
        "category": "Scope 1 - Direct Emissions",
        "confidence": 92,
        "unit": "therm",
        "usageCount": 145,
        "lastUsed": "2024-11-15",
        "explanation": "Based on description matching and usage patterns",
        "factor": 5.3,
    },
    {
        "id": "ef-2",
        "name": "Electricity - Grid Purchase (Colorado)",
        "category": "Scope 2 - Indirect Emissions",
        "confidence": 88,
        "unit": "kWh",
        "usageCount": 230,
        "lastUsed": "2024-11-14",
        "explanation": "Regional grid factor for Colorado based on EPA eGRID data",
        "factor": 0.52,
    },
    {
        "id": "ef-3",
        "name": "Medical Supplies - Plastic Products",
        "category": "Scope 3 - Value Chain",
        "confidence": 65,
        "unit": "kg",
        "usageCount": 78,
        "lastUsed": "2024-11-10",
        "explanation": "Life cycle analysis for medical grade plastic products",
        "factor": 2.8,
    },
    {
        "id": "ef-4",
        "name": "Diesel - Stationary Combustion",
        "category": "Scope 1 - Direct Emissions",
        "confidence": 95,
        "unit": "gallon",
        "usageCount": 56,
        "lastUsed": "2024-11-12",
        "explanation": "EPA emission factor for diesel fuel combustion",
        "factor": 10.2,
    },
]


def _make_item(item_id: str, confidence: float = 90, factor_id: str | None = None) -> LineItem:
    """Build a minimal line item."""
    return LineItem.from_dict(
        {
            "id": item_id,
            "description": f"Item {item_id}",
            "quantity": 1,
            "unit": "kg",
            "suggestedFactor": {
                "id": factor_id or f"ef-{item_id}",
                "name": f"Factor {item_id}",
                "confidence": confidence,
            },
        }
    )


@pytest.fixture
def line_items() -> list[LineItem]:
    """Sample line items."""
    return parse_line_items(SAMPLE_LINE_ITEMS)


@pytest.fixture
def factors() -> list[EmissionFactor]:
    """Sample factor catalog."""
    return [EmissionFactor.from_dict(f) for f in SAMPLE_FACTORS]


@pytest.fixture
def many_items() -> list[LineItem]:
    """A thousand line items for windowing."""
    return [_make_item(str(i)) for i in range(1000)]


@pytest.fixture
def make_item():
    """Factory for minimal line items."""
    return _make_item


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual-clock scheduler for debounce tests."""
    return ManualScheduler()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return datetime(2024, 11, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def items_file(tmp_path) -> Path:
    """Line items written to a JSON file."""
    import json

    path = tmp_path / "items.json"
    path.write_text(json.dumps({"lineItems": SAMPLE_LINE_ITEMS}))
    return path


@pytest.fixture
def factors_file(tmp_path) -> Path:
    """Factor catalog written to a YAML file."""
    import yaml

    path = tmp_path / "factors.yaml"
    path.write_text(yaml.safe_dump({"factors": SAMPLE_FACTORS}))
    return path
