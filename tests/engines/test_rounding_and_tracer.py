"""Tests for the rounding utility and the engine tracer."""

from decimal import Decimal

import pytest

from stock_engines.rounding import is_rounded, quantum, round_amount
from stock_engines.tracer import compute_input_fingerprint, traced_engine


class TestRoundAmount:

    def test_half_up(self):
        assert round_amount("0.000005") == Decimal("0.00001")
        assert round_amount("2.675", 2) == Decimal("2.68")

    def test_negative_half_rounds_away_from_zero(self):
        assert round_amount("-0.000005") == Decimal("-0.00001")

    def test_negative_zero_normalised(self):
        result = round_amount("-0.000001")
        assert result == Decimal("0")
        assert not result.is_signed()

    def test_idempotent(self):
        once = round_amount("12.3456789")
        assert round_amount(once) == once
        assert is_rounded(once)

    def test_non_finite_passes_through(self):
        assert round_amount(Decimal("NaN")).is_nan()

    def test_float_goes_through_str(self):
        assert round_amount(0.1) == Decimal("0.10000")

    def test_negative_places_rejected(self):
        with pytest.raises(ValueError):
            quantum(-1)


class TestTracer:

    def test_fingerprint_is_stable_and_selective(self):
        a = compute_input_fingerprint(("x",), {"x": Decimal("1.50"), "y": 1})
        b = compute_input_fingerprint(("x",), {"x": Decimal("1.50"), "y": 2})
        assert a == b
        assert len(a) == 16

    def test_decorated_function_logs_trace(self, captured_logs):
        @traced_engine("demo", "2.0", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(Decimal("2")) == Decimal("4")
        traces = [r for r in captured_logs() if r.get("trace_type") == "STOCK_ENGINE_TRACE"]
        assert traces[-1]["engine_name"] == "demo"
        assert traces[-1]["engine_version"] == "2.0"
        assert traces[-1]["input_fingerprint"] == compute_input_fingerprint(
            ("value",), {"value": Decimal("2")}
        )
