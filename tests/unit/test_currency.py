"""
Tests for currency validation and precision.

- Codes are validated and normalized at the domain boundary.
- Rounding tolerance is derived from the currency's decimal places.
"""

import pytest
from decimal import Decimal

from ledger_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from ledger_kernel.domain.values import Currency, Money


class TestCurrencyValidation:

    def test_valid_codes_accepted(self):
        for code in ["USD", "EUR", "GBP", "JPY", "KWD"]:
            assert CurrencyRegistry.is_valid(code)
            assert CurrencyRegistry.validate(code) == code

    def test_codes_normalized(self):
        assert CurrencyRegistry.validate("usd") == "USD"
        assert CurrencyRegistry.validate(" EUR ") == "EUR"

    def test_unknown_codes_rejected(self):
        for code in ["XXY", "123", "US", "USDD", ""]:
            assert not CurrencyRegistry.is_valid(code)

    def test_validate_raises_on_unknown_code(self):
        with pytest.raises(ValueError, match="Invalid ISO 4217 currency code"):
            CurrencyRegistry.validate("ABC")

    def test_validate_raises_on_wrong_length(self):
        with pytest.raises(ValueError, match="must be 3 characters"):
            CurrencyRegistry.validate("USDD")

    def test_validate_raises_on_empty_or_none(self):
        with pytest.raises(ValueError, match="Invalid currency code"):
            CurrencyRegistry.validate("")
        with pytest.raises(ValueError, match="Invalid currency code"):
            CurrencyRegistry.validate(None)

    def test_currency_value_object_validates(self):
        assert Currency("usd").code == "USD"
        with pytest.raises(ValueError):
            Currency("XXY")

    def test_money_validates_currency(self):
        with pytest.raises(ValueError):
            Money.of(Decimal("100.00"), "XXY")


class TestPrecisionDerivedTolerance:

    @pytest.mark.parametrize("code,tolerance", [
        ("USD", Decimal("0.01")),
        ("JPY", Decimal("1")),
        ("KWD", Decimal("0.001")),
    ])
    def test_tolerance_by_currency(self, code, tolerance):
        assert CurrencyRegistry.get_rounding_tolerance(code) == tolerance
        assert Currency(code).rounding_tolerance == tolerance

    def test_currency_info_tolerance_matches_decimal_places(self):
        assert CurrencyInfo("USD", 2, "US Dollar").rounding_tolerance == Decimal("0.01")
        assert CurrencyInfo("JPY", 0, "Japanese Yen").rounding_tolerance == Decimal("1")
        assert CurrencyInfo("XTS", 4, "Test").rounding_tolerance == Decimal("0.0001")

    def test_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("USD") == 2
        assert CurrencyRegistry.get_decimal_places("BHD") == 3
