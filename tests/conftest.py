"""Common test fixtures for pipeline-xray."""

from typing import Any

import pytest

from pipeline_xray.registry import MemoryTraceRegistry
from pipeline_xray.testing import ScriptedReasoner
from pipeline_xray.tracing import Tracer


@pytest.fixture
def registry() -> MemoryTraceRegistry:
    return MemoryTraceRegistry()


@pytest.fixture
def tracer(registry: MemoryTraceRegistry) -> Tracer:
    return Tracer(registry)


@pytest.fixture
def products() -> list[dict[str, Any]]:
    """Small product catalog with nested fields and mixed value kinds."""
    return [
        {
            "title": "Steel Water Bottle",
            "category": "Kitchen",
            "material": "Steel",
            "price": 10,
            "rating": 4.6,
            "in_stock": True,
            "specs": {"capacity_ml": 750},
        },
        {
            "title": "Glass Water Bottle",
            "category": "Kitchen",
            "material": "Glass",
            "price": 50,
            "rating": 4.1,
            "in_stock": False,
            "specs": {"capacity_ml": 500},
        },
        {
            "title": "Plastic Sports Bottle",
            "category": "Sports",
            "material": "Plastic",
            "price": 15,
            "rating": 3.9,
            "in_stock": True,
            "specs": {"capacity_ml": 1000},
        },
        {
            "title": "Trail Running Shoes",
            "category": "Sports",
            "material": "Mesh",
            "price": 120,
            "rating": 4.8,
            "in_stock": True,
            "specs": {"capacity_ml": 0},
        },
    ]


@pytest.fixture
def scripted() -> ScriptedReasoner:
    return ScriptedReasoner()
