"""Parser for template-variable query strings.

Template variables are configured with strings such as
``Namespace=QCE/CVM&Action=DescribeInstances&Region=ap-guangzhou``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional


def _decode_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_metric_query(query: Optional[str]) -> Dict[str, Any]:
    """Split ``query`` into a mapping of lowercased keys to decoded values.

    Values that are valid JSON (numbers, lists, objects) are decoded, anything
    else is kept as the trimmed string. Items without a key are dropped.
    """

    if not query or not isinstance(query, str):
        return {}
    result: Dict[str, Any] = {}
    for item in query.split("&"):
        key, _, value = item.partition("=")
        key = key.strip().lower()
        if not key:
            continue
        result[key] = _decode_value(value.strip())
    return result
