"""
ledger_config -- single public entrypoint for inventory ledger settings.

Responsibility:
    Provides the ONLY way to obtain inventory settings at runtime through
    ``get_inventory_settings()``.  YAML loading is internal to this package.

Architecture position:
    Configuration.  Sits above ``ledger_kernel`` and below
    ``ledger_modules``.  The kernel MUST NEVER import from ``ledger_config``.

Failure modes:
    - ``FileNotFoundError`` -- settings file does not exist.
    - ``ValueError`` -- unknown keys or invalid currency.
    - ``yaml.YAMLError`` -- malformed YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_inventory_settings
from ledger_config.schema import SETTING_LABELS, InventorySettings

_logger = logging.getLogger("ledger_kernel.config")

_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "sets" / "inventory.yaml"


def get_inventory_settings(path: Path | str | None = None) -> InventorySettings:
    """
    Load inventory settings from ``path`` (default: the packaged set).

    Emits an ``inventory_settings_loaded`` trace with the configured
    account codes so postings can be tied back to the settings in force.
    """
    settings_path = Path(path) if path is not None else _DEFAULT_SETTINGS_FILE
    settings = load_inventory_settings(settings_path)
    _logger.info(
        "inventory_settings_loaded",
        extra={
            "path": str(settings_path),
            "stock_in_hand": settings.stock_in_hand,
            "cost_of_goods_sold": settings.cost_of_goods_sold,
            "stock_received_but_not_billed": settings.stock_received_but_not_billed,
            "currency": settings.currency,
        },
    )
    return settings


__all__ = [
    "SETTING_LABELS",
    "InventorySettings",
    "get_inventory_settings",
]
