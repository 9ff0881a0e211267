"""
Pytest fixtures for the stock breakdown test suite.

Provides:
- In-memory SQLite engine and sessions (fresh schema per test)
- Structured log capture
- Sample source items
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from stock_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from stock_modules.inventory.models import SourceItem
from stock_modules.inventory.repository import SqlItemRepository


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "breakdown_opened" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    db_session = get_session()
    yield db_session
    db_session.rollback()
    db_session.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def bulk_screws() -> SourceItem:
    """Quantity-tracked source item with 10 units."""
    return SourceItem(
        id="00000000-0000-0000-0000-000000000001",
        name="Bulk Screws",
        sku="SCR-100",
        tracking_type=MeasurementType.QUANTITY,
        category="Hardware",
        price=Decimal("2.50"),
        cost=Decimal("1.25"),
        quantity=Decimal("10"),
        tags=("bulk", "fasteners"),
    )


@pytest.fixture
def fabric_roll() -> SourceItem:
    """Length-tracked source item: 12.5 ft of fabric."""
    return SourceItem(
        id="00000000-0000-0000-0000-000000000002",
        name="Fabric Roll",
        sku="FAB-001",
        tracking_type=MeasurementType.LENGTH,
        category="Textiles",
        price=Decimal("40"),
        cost=Decimal("18"),
        length=Decimal("12.5"),
        length_unit="ft",
    )


@pytest.fixture
def stored_items(session, bulk_screws, fabric_roll):
    """Persist the sample items plus two allocation targets."""
    repo = SqlItemRepository(session)
    small_box = SourceItem(
        id="00000000-0000-0000-0000-000000000003",
        name="Screws Small Box",
        sku="SKU-00007",
        quantity=Decimal("2"),
    )
    large_box = SourceItem(
        id="00000000-0000-0000-0000-000000000004",
        name="Screws Large Box",
        sku="SKU-00012",
        quantity=Decimal("0"),
    )
    items = [repo.save(i) for i in (bulk_screws, fabric_roll, small_box, large_box)]
    session.commit()
    return {i.sku: i for i in items}
