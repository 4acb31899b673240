"""Tests for quantity helpers"""
from decimal import Decimal
import pytest

from utils.quantity import milli_scaled, milli_value


class TestMilliValue:

    def test_milli_suffix(self):
        assert milli_value("1500m") == 1500

    def test_plain_integer(self):
        assert milli_value("2") == 2000
        assert milli_value(3) == 3000

    def test_binary_suffix(self):
        assert milli_value("1Ki") == 1024000

    def test_rounds_up_below_milli_precision(self):
        assert milli_value("0.0001") == 1

    def test_decimal_input(self):
        assert milli_value(Decimal("0.25")) == 250

    def test_invalid_quantity(self):
        with pytest.raises(ValueError):
            milli_value("lots")


class TestMilliScaled:

    def test_scaled_value(self):
        assert milli_scaled("1500m") == 1.5
        assert milli_scaled("2000m") == 2.0
        assert milli_scaled("250") == 250.0

    def test_missing_quantity_is_zero(self):
        assert milli_scaled(None) == 0.0
        assert milli_scaled("") == 0.0

    @pytest.mark.parametrize("milli", [0, 1, 999, 1000, 123456])
    def test_recovers_milli_quantized_value(self, milli):
        assert milli_scaled(f"{milli}m") == milli / 1000
