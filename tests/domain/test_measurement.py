"""Tests for the unit model and typed failures."""

from decimal import Decimal

import pytest

from stock_kernel.domain.failures import OverAllocation, ValidationFailure
from stock_kernel.domain.measurement import (
    Measurement,
    MeasurementType,
    format_measurement,
    unit_label,
    validate_unit,
)
from stock_kernel.domain.values import coerce_decimal, safe_divide, to_decimal
from stock_kernel.exceptions import InvalidUnitError, UnknownMeasurementTypeError


class TestMeasurementType:

    def test_parse_is_case_insensitive(self):
        assert MeasurementType.parse(" Weight ") is MeasurementType.WEIGHT

    def test_unknown_type_raises(self):
        with pytest.raises(UnknownMeasurementTypeError) as exc_info:
            MeasurementType.parse("mass")
        assert exc_info.value.code == "UNKNOWN_MEASUREMENT_TYPE"

    @pytest.mark.parametrize("mtype, unit", [
        (MeasurementType.QUANTITY, "units"),
        (MeasurementType.WEIGHT, "lb"),
        (MeasurementType.LENGTH, "in"),
        (MeasurementType.AREA, "sqft"),
        (MeasurementType.VOLUME, "l"),
    ])
    def test_default_units(self, mtype, unit):
        assert mtype.default_unit == unit
        assert unit in mtype.units


class TestUnits:

    def test_empty_unit_takes_default(self):
        assert validate_unit(MeasurementType.VOLUME, "") == "l"
        assert validate_unit(MeasurementType.VOLUME, None) == "l"

    def test_unit_from_other_type_rejected(self):
        with pytest.raises(InvalidUnitError):
            validate_unit(MeasurementType.WEIGHT, "ft")

    def test_labels(self):
        assert unit_label("cu_ft") == "cu ft"
        assert unit_label("floz") == "fl oz"
        assert unit_label("kg") == "kg"


class TestMeasurement:

    def test_quantity_formatting(self):
        assert format_measurement(Measurement.of("quantity", "10")) == "10 units"

    def test_trailing_zeros_dropped(self):
        assert str(Measurement.of("weight", "2.50000", "kg")) == "2.5 kg"

    def test_area_label(self):
        assert str(Measurement.of("area", 3, "sqm")) == "3 sq m"

    def test_invalid_unit_at_construction(self):
        with pytest.raises(InvalidUnitError):
            Measurement.of("length", "1", "kg")

    def test_with_amount_keeps_unit(self):
        m = Measurement.of("length", "1", "yd").with_amount(Decimal("4"))
        assert m.unit == "yd"
        assert m.amount == Decimal("4")


class TestValues:

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_unparseable_string(self):
        with pytest.raises(ValueError):
            to_decimal("twelve")
        assert coerce_decimal("twelve") is None

    def test_safe_divide_by_zero(self):
        assert safe_divide(Decimal("5"), Decimal("0")) == Decimal("0")


class TestFailures:

    def test_weight_over_allocation_message(self):
        failure = OverAllocation(MeasurementType.WEIGHT, Decimal("3"), Decimal("1.5"), "kg")
        assert failure.message == "Not enough weight remaining. Only 1.5 kg available."
        assert failure.code == "OVER_ALLOCATION"

    def test_missing_unit_uses_default(self):
        failure = OverAllocation(MeasurementType.VOLUME, Decimal("3"), Decimal("2"))
        assert failure.message.endswith("Only 2 l available.")

    def test_invalid_amount_factory(self):
        failure = ValidationFailure.invalid_amount("tax_rate", "-1")
        assert failure.code == "INVALID_AMOUNT"
        assert failure.field == "tax_rate"
        assert "'-1'" in failure.message
