"""
Parser for the Collins asset find response (JSON envelope).

Only pulls out the handful of fields the exporter needs. Collins
omits or nulls whole sections for assets that don't have them (no
IPMI, no classification, no addresses), so every lookup falls back
to an empty value instead of failing the page.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from collins_exporter.metrics import AssetRecord, Pagination


class PayloadError(ValueError):
    """The response body doesn't look like a Collins find response."""


def _section(obj: Any, key: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        return {}
    value = obj.get(key)
    return value if isinstance(value, dict) else {}


def _text(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    return "" if value is None else str(value)


def _int(obj: Dict[str, Any], key: str, default: int = 0) -> int:
    value = obj.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_asset(item: Dict[str, Any]) -> AssetRecord:
    meta = _section(item, "ASSET")
    tag = _text(meta, "TAG")
    if not tag:
        raise PayloadError("asset entry without a TAG")

    addresses = item.get("ADDRESSES") or []
    return AssetRecord(
        tag=tag,
        status=_text(meta, "STATUS"),
        state=_int(_section(meta, "STATE"), "ID"),
        nodeclass=_text(_section(item, "CLASSIFICATION"), "TAG"),
        ipmi_address=_text(_section(item, "IPMI"), "ADDRESS"),
        addresses=tuple(
            _text(addr, "ADDRESS") for addr in addresses if isinstance(addr, dict)
        ),
    )


def parse_pagination(data: Dict[str, Any], fallback_page: Optional[int] = None) -> Pagination:
    pagination = _section(data, "Pagination")
    if not pagination:
        raise PayloadError("response has no Pagination section")

    current = _int(pagination, "CurrentPage", fallback_page or 0)
    return Pagination(
        current_page=current,
        next_page=_int(pagination, "NextPage", current),
        previous_page=_int(pagination, "PreviousPage"),
        total_results=_int(pagination, "TotalResults"),
    )


def parse_find_response(payload: Any, page: Optional[int] = None) -> Tuple[List[AssetRecord], Pagination]:
    """Turn a decoded /api/assets body into (records, pagination)."""
    if not isinstance(payload, dict):
        raise PayloadError("response body is not a JSON object")

    status = _text(payload, "status")
    if status and not status.startswith("success"):
        message = _text(_section(payload, "data"), "message") or status
        raise PayloadError(f"Collins returned {message}")

    data = _section(payload, "data")
    items = data.get("Data")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise PayloadError("Data section is not a list")

    records = [parse_asset(item) for item in items if isinstance(item, dict)]
    return records, parse_pagination(data, fallback_page=page)
