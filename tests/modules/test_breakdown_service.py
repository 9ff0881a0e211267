"""Integration tests for BreakdownService against an in-memory database."""

from decimal import Decimal

import pytest

from stock_config import get_active_config
from stock_kernel.domain.failures import FailureCode
from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.exceptions import ItemNotFoundError
from stock_modules.breakdown import (
    BreakdownMode,
    BreakdownService,
    BreakdownStatus,
    SessionState,
)
from stock_modules.inventory.repository import SequentialSkuGenerator, SqlItemRepository


BULK_ID = "00000000-0000-0000-0000-000000000001"
SMALL_BOX_ID = "00000000-0000-0000-0000-000000000003"
LARGE_BOX_ID = "00000000-0000-0000-0000-000000000004"


class ExplodingRepository(SqlItemRepository):
    """Fails after the drafts hit the session."""

    def create_items(self, drafts):
        super().create_items(drafts)
        raise RuntimeError("disk full")


class TestSkuGenerator:

    def test_next_after_highest(self, session, stored_items):
        assert SequentialSkuGenerator(session).next_sku() == "SKU-00013"

    def test_empty_store(self, session):
        assert SequentialSkuGenerator(session).next_sku() == "SKU-00001"

    def test_derived_skus_ignored(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID)
        breakdown.add_record(Decimal("10"))
        service.commit(breakdown)
        assert SequentialSkuGenerator(session).next_sku() == "SKU-00013"


class TestStart:

    def test_start_seeds_sku(self, session, stored_items):
        breakdown = BreakdownService(session).start(BULK_ID)
        assert breakdown.state is SessionState.IDLE
        assert breakdown.remaining_amount == Decimal("10")
        assert breakdown.add_record(Decimal("1")).record.sku == "SKU-00013-01"

    def test_from_config(self, session, stored_items, tmp_path, monkeypatch):
        monkeypatch.delenv("STOCK_CONFIG_PATH", raising=False)
        path = tmp_path / "shop.yaml"
        path.write_text("config_id: shop\ninventory:\n  sku_prefix: SCR\n  sku_width: 4\n")
        config = get_active_config(path)
        breakdown = BreakdownService.from_config(session, config).start(BULK_ID)
        assert breakdown.add_record(Decimal("1")).record.sku == "SCR-0101-01"

    def test_unknown_source(self, session, stored_items):
        with pytest.raises(ItemNotFoundError):
            BreakdownService(session).start("00000000-0000-0000-0000-0000000000ff")

    def test_malformed_source_id(self, session, stored_items):
        with pytest.raises(ItemNotFoundError):
            BreakdownService(session).start("not-a-uuid")

    def test_search_targets_excludes_source(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        names = [i.name for i in service.search_targets(breakdown, "screws")]
        assert names == ["Screws Large Box", "Screws Small Box"]


class TestCreateMode:

    def test_commit_creates_items_and_reduces_source(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID)
        breakdown.add_record(Decimal("4"))
        breakdown.add_record(Decimal("6"), name="Screws Tin")

        result = service.commit(breakdown)

        assert result.status is BreakdownStatus.COMMITTED
        assert breakdown.state is SessionState.CLOSED
        assert [i.sku for i in result.items] == ["SKU-00013-01", "SKU-00013-02"]
        assert [i.name for i in result.items] == ["Bulk Screws Variant 1", "Screws Tin"]
        created = result.items[0]
        assert created.tracking_type is MeasurementType.QUANTITY
        assert created.quantity == Decimal("4")
        assert created.category == "Hardware"
        assert created.tags == ("bulk", "fasteners")

        repo = SqlItemRepository(session)
        assert repo.get_source_item(BULK_ID).quantity == Decimal("0")
        assert repo.get_source_item(created.id).quantity == Decimal("4")

    def test_partial_breakdown_leaves_remainder(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID)
        breakdown.add_record(Decimal("3"))
        service.commit(breakdown)
        assert SqlItemRepository(session).get_source_item(BULK_ID).quantity == Decimal("7")

    def test_length_source(self, session, stored_items, fabric_roll):
        service = BreakdownService(session)
        breakdown = service.start(fabric_roll.id)
        breakdown.add_record("2.5")
        result = service.commit(breakdown)
        item = result.items[0]
        assert item.tracking_type is MeasurementType.LENGTH
        assert item.length == Decimal("2.5")
        assert item.length_unit == "ft"
        remaining = SqlItemRepository(session).get_source_item(fabric_roll.id)
        assert remaining.length == Decimal("10")

    def test_rejected_commit_writes_nothing(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID)
        breakdown.add_record(Decimal("2"), sku=" ")

        result = service.commit(breakdown)

        assert result.status is BreakdownStatus.REJECTED
        assert result.failure.code == FailureCode.SKU_REQUIRED
        assert breakdown.state is SessionState.EDITING
        assert SqlItemRepository(session).get_source_item(BULK_ID).quantity == Decimal("10")
        assert SqlItemRepository(session).search("SKU-00013") == []

    def test_persist_failure_rolls_back(self, session, stored_items, captured_logs):
        service = BreakdownService(session, repository=ExplodingRepository(session))
        breakdown = service.start(BULK_ID)
        breakdown.add_record(Decimal("4"))

        with pytest.raises(RuntimeError, match="disk full"):
            service.commit(breakdown)

        assert breakdown.state is SessionState.EDITING
        assert len(breakdown.records) == 1
        repo = SqlItemRepository(session)
        assert repo.get_source_item(BULK_ID).quantity == Decimal("10")
        assert repo.search("SKU-00013") == []
        assert any(r["message"] == "breakdown_persist_failed" for r in captured_logs())

    def test_retry_after_failure(self, session, stored_items):
        failing = BreakdownService(session, repository=ExplodingRepository(session))
        breakdown = failing.start(BULK_ID)
        breakdown.add_record(Decimal("4"))
        with pytest.raises(RuntimeError):
            failing.commit(breakdown)

        result = BreakdownService(session).commit(breakdown)
        assert result.is_success
        assert SqlItemRepository(session).get_source_item(BULK_ID).quantity == Decimal("6")


class TestAllocateMode:

    def test_commit_adds_to_targets(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        breakdown.add_record(Decimal("3"), target_id=SMALL_BOX_ID)
        breakdown.add_record(Decimal("2"), target_id=LARGE_BOX_ID)

        result = service.commit(breakdown)

        assert result.is_success
        assert [i.id for i in result.items] == [SMALL_BOX_ID, LARGE_BOX_ID]
        repo = SqlItemRepository(session)
        assert repo.get_source_item(SMALL_BOX_ID).quantity == Decimal("5")
        assert repo.get_source_item(LARGE_BOX_ID).quantity == Decimal("2")
        assert repo.get_source_item(BULK_ID).quantity == Decimal("5")

    def test_unknown_target_rolls_back(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        breakdown.add_record(Decimal("3"), target_id=SMALL_BOX_ID)
        breakdown.add_record(Decimal("2"), target_id="00000000-0000-0000-0000-0000000000ff")

        with pytest.raises(ItemNotFoundError):
            service.commit(breakdown)

        assert breakdown.state is SessionState.EDITING
        repo = SqlItemRepository(session)
        assert repo.get_source_item(SMALL_BOX_ID).quantity == Decimal("2")
        assert repo.get_source_item(BULK_ID).quantity == Decimal("10")

    def test_self_allocation_rejected(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        breakdown.add_record(Decimal("3"), target_id=BULK_ID)
        result = service.commit(breakdown)
        assert result.status is BreakdownStatus.REJECTED
        assert result.failure.code == FailureCode.SELF_ALLOCATION

    def test_self_allocation_rejected_for_any_uuid_spelling(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        breakdown.add_record(Decimal("3"), target_id=BULK_ID.replace("-", ""))
        result = service.commit(breakdown)
        assert result.status is BreakdownStatus.REJECTED
        assert result.failure.code == FailureCode.SELF_ALLOCATION

    def test_duplicate_target_rejected_for_any_uuid_spelling(self, session, stored_items):
        service = BreakdownService(session)
        breakdown = service.start(BULK_ID, mode=BreakdownMode.ALLOCATE)
        breakdown.add_record(Decimal("3"), target_id=SMALL_BOX_ID)
        breakdown.add_record(Decimal("2"), target_id=SMALL_BOX_ID.replace("-", "").upper())

        result = service.commit(breakdown)

        assert result.status is BreakdownStatus.REJECTED
        assert result.failure.code == FailureCode.DUPLICATE_TARGET
        repo = SqlItemRepository(session)
        assert repo.get_source_item(SMALL_BOX_ID).quantity == Decimal("2")
        assert repo.get_source_item(BULK_ID).quantity == Decimal("10")
