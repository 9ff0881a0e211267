"""
Property-based tests with Hypothesis.

Properties checked here:
- Capacity conservation across arbitrary add / edit / remove sequences
- A refused edit never changes the session
- Rounding is idempotent and bounded by half a quantum
- Line costing never produces a negative total
- Purchase totals equal subtotal - discount + tax + shipping
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from stock_engines.cost_derivation import CostDerivationEngine, EditedField, LineCosting
from stock_engines.purchase_totals import PurchaseAggregator
from stock_engines.rounding import quantum, round_amount
from stock_kernel.domain.measurement import MeasurementType
from stock_modules.breakdown import BreakdownSession, EditStatus
from stock_modules.inventory.models import SourceItem

amounts = st.decimals(min_value=0, max_value=1000, places=2, allow_nan=False, allow_infinity=False)
percentages = st.decimals(min_value=0, max_value=100, places=3, allow_nan=False, allow_infinity=False)

operations = st.lists(
    st.tuples(
        st.sampled_from(["add", "edit", "remove"]),
        st.integers(min_value=0, max_value=9),
        amounts,
    ),
    max_size=30,
)


def _source(capacity: Decimal) -> SourceItem:
    return SourceItem(
        id="00000000-0000-0000-0000-0000000000f0",
        name="Fuzz Stock",
        sku="FZ-1",
        tracking_type=MeasurementType.WEIGHT,
        weight=capacity,
        weight_unit="kg",
    )


class TestConservation:

    @pytest.mark.slow
    @given(capacity=amounts, ops=operations)
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_remaining_tracks_records(self, capacity, ops):
        session = BreakdownSession()
        session.open(_source(capacity))

        for op, index, amount in ops:
            records = session.records
            before_remaining = session.remaining_amount
            if op == "add":
                result = session.add_record(amount)
                fits = amount <= before_remaining
                assert result.is_success == fits
                if not fits:
                    assert result.status is EditStatus.OVER_ALLOCATED
                    assert session.records == records
            elif records:
                target = records[index % len(records)]
                if op == "edit":
                    result = session.update_amount(target.record_id, amount)
                    if not result.is_success:
                        assert session.get_record(target.record_id).amount == target.amount
                        assert session.remaining_amount == before_remaining
                else:
                    session.remove_record(target.record_id)

            allocated = sum((r.amount for r in session.records), Decimal("0"))
            assert session.remaining_amount >= 0
            assert session.remaining_amount == capacity - allocated
            # untracked types never move
            assert session.remaining.get(MeasurementType.QUANTITY) == Decimal("0")

    @given(capacity=amounts)
    def test_fill_exactly_then_nothing_fits(self, capacity):
        session = BreakdownSession()
        session.open(_source(capacity))
        assert session.add_record(capacity).is_success
        assert session.is_fully_allocated
        assert session.add_record(Decimal("0.01")).status is EditStatus.OVER_ALLOCATED


class TestRounding:

    @given(st.decimals(min_value=-10**9, max_value=10**9, places=8, allow_nan=False, allow_infinity=False))
    def test_idempotent(self, value):
        once = round_amount(value)
        assert round_amount(once) == once

    @given(st.decimals(min_value=-10**9, max_value=10**9, places=8, allow_nan=False, allow_infinity=False))
    def test_within_half_quantum(self, value):
        assert abs(round_amount(value) - value) <= quantum(5) / 2


class TestCosting:

    @given(amount=amounts, cost=amounts, pct=percentages)
    def test_percentage_discount_total_non_negative(self, amount, cost, pct):
        engine = CostDerivationEngine()
        line = LineCosting.from_inputs(amount, cost)
        derived = engine.derive(line, EditedField.DISCOUNT_PERCENTAGE, pct).line
        assert derived.total_cost >= 0
        assert derived.total_cost == round_amount(derived.base_amount - derived.discount_amount)

    @given(amount=amounts, cost=amounts, discount=amounts)
    def test_amount_discount_clamped(self, amount, cost, discount):
        engine = CostDerivationEngine()
        line = LineCosting.from_inputs(amount, cost)
        derived = engine.derive(line, EditedField.DISCOUNT_AMOUNT, discount).line
        assert derived.discount_amount == discount
        assert derived.total_cost == max(Decimal("0"), derived.base_amount - discount)


class TestPurchaseTotals:

    @given(
        lines=st.lists(amounts, max_size=20),
        discount=amounts,
        tax_rate=percentages,
        shipping=amounts,
    )
    def test_total_formula(self, lines, discount, tax_rate, shipping):
        totals = PurchaseAggregator().recompute(lines, discount, tax_rate, shipping)
        assert totals.subtotal == sum(lines, Decimal("0"))
        assert totals.tax_amount == round_amount(totals.subtotal * tax_rate / 100)
        assert totals.total == totals.subtotal - discount + totals.tax_amount + shipping
        assert totals.line_count == len(lines)
