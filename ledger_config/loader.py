"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into ``InventorySettings``.
Callers outside this package go through ``ledger_config.get_inventory_settings``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys, non-mapping document or invalid currency -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import InventorySettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Returns an empty dict for an empty file.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    # Account codes like 1400 are parsed by YAML as ints.
    return str(value)


def parse_inventory_settings(data: dict[str, Any]) -> InventorySettings:
    """
    Parse the ``inventory`` section of a settings document.

    Accepts either the section itself or a document with a top-level
    ``inventory`` key.
    """
    section = data.get("inventory", data)
    if not isinstance(section, dict):
        raise ValueError("inventory settings must be a mapping")

    unknown = set(section) - InventorySettings.field_names()
    if unknown:
        raise ValueError(f"Unknown inventory settings: {sorted(unknown)}")

    return InventorySettings(
        stock_in_hand=_optional_str(section, "stock_in_hand"),
        cost_of_goods_sold=_optional_str(section, "cost_of_goods_sold"),
        stock_received_but_not_billed=_optional_str(
            section, "stock_received_but_not_billed"
        ),
        round_off_account=_optional_str(section, "round_off_account"),
        currency=section.get("currency", "USD"),
        shipment_terms=section.get("shipment_terms") or "",
        purchase_receipt_terms=section.get("purchase_receipt_terms") or "",
    )


def load_inventory_settings(path: Path) -> InventorySettings:
    return parse_inventory_settings(load_yaml_file(path))
