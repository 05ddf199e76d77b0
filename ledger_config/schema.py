"""
Inventory settings schema (``ledger_config.schema``).

Defines the frozen dataclass holding the ledger accounts a stock transfer
posts to, plus the defaults applied to new transfers.  ``InventorySettings``
is also the settings provider injected into the stock transfer components:
they read accounts through ``setting_value`` and never from global state.
"""

from dataclasses import dataclass, fields

from ledger_kernel.domain.currency import CurrencyRegistry

# Human-readable labels, used in validation messages.
SETTING_LABELS: dict[str, str] = {
    "stock_in_hand": "Stock In Hand",
    "cost_of_goods_sold": "Cost Of Goods Sold",
    "stock_received_but_not_billed": "Stock Received But Not Billed",
    "round_off_account": "Round Off",
    "currency": "Currency",
    "shipment_terms": "Shipment Terms",
    "purchase_receipt_terms": "Purchase Receipt Terms",
}


@dataclass(frozen=True)
class InventorySettings:
    """
    Inventory ledger configuration.

    Account fields hold account codes and may be unset (None); validation of
    the accounts a given transfer needs happens at posting time, so that
    every missing account can be reported at once.
    """

    stock_in_hand: str | None = None
    cost_of_goods_sold: str | None = None
    stock_received_but_not_billed: str | None = None
    round_off_account: str | None = None
    currency: str = "USD"
    shipment_terms: str = ""
    purchase_receipt_terms: str = ""

    def __post_init__(self):
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))

    def setting_value(self, name: str) -> str | None:
        """Value of a setting, with empty strings treated as unset."""
        if name not in SETTING_LABELS:
            raise KeyError(f"Unknown inventory setting: {name}")
        value = getattr(self, name)
        return value or None

    def setting_label(self, name: str) -> str:
        return SETTING_LABELS.get(name, name)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
