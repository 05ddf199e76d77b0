"""Currency -- ISO 4217 registry and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Code, minor-unit precision and display name of one currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """One minor unit, e.g. 0.01 for USD and 1 for JPY."""
        return Decimal(1).scaleb(-self.decimal_places)


# Currencies a transfer may be valued in, grouped by minor-unit precision.
_BY_PRECISION: dict[int, dict[str, str]] = {
    0: {
        "CLP": "Chilean Peso",
        "ISK": "Icelandic Krona",
        "JPY": "Japanese Yen",
        "KRW": "South Korean Won",
        "VND": "Vietnamese Dong",
        "XAF": "Central African CFA Franc",
        "XOF": "West African CFA Franc",
    },
    2: {
        "AED": "UAE Dirham",
        "AUD": "Australian Dollar",
        "BRL": "Brazilian Real",
        "CAD": "Canadian Dollar",
        "CHF": "Swiss Franc",
        "CNY": "Chinese Yuan",
        "DKK": "Danish Krone",
        "EUR": "Euro",
        "GBP": "Pound Sterling",
        "HKD": "Hong Kong Dollar",
        "INR": "Indian Rupee",
        "MXN": "Mexican Peso",
        "NOK": "Norwegian Krone",
        "NZD": "New Zealand Dollar",
        "SEK": "Swedish Krona",
        "SGD": "Singapore Dollar",
        "USD": "US Dollar",
        "ZAR": "South African Rand",
    },
    3: {
        "BHD": "Bahraini Dinar",
        "JOD": "Jordanian Dinar",
        "KWD": "Kuwaiti Dinar",
        "OMR": "Omani Rial",
        "TND": "Tunisian Dinar",
    },
}


class CurrencyRegistry:
    """
    Lookup of supported currencies.

    Postings are single-currency; the registry only supplies the precision
    used to round amounts and size the rounding tolerance.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        code: CurrencyInfo(code, places, name)
        for places, names in _BY_PRECISION.items()
        for code, name in names.items()
    }

    @staticmethod
    def _normalize(code: object) -> str | None:
        if not code or not isinstance(code, str):
            return None
        return code.upper().strip()

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        normalized = cls._normalize(code)
        return cls._CURRENCIES.get(normalized) if normalized else None

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Minor-unit precision; 2 for codes the registry does not know."""
        info = cls.get_info(code)
        return info.decimal_places if info else 2

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        return Decimal(1).scaleb(-cls.get_decimal_places(code))

    @classmethod
    def validate(cls, code: str) -> str:
        """Return the normalized code, or raise ValueError."""
        normalized = cls._normalize(code)
        if normalized is None:
            raise ValueError(f"Invalid currency code: {code!r}")
        if len(normalized) != 3:
            raise ValueError(f"Currency code must be 3 characters: {code!r}")
        if normalized not in cls._CURRENCIES:
            raise ValueError(f"Invalid ISO 4217 currency code: {code!r}")
        return normalized
