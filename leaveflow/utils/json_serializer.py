"""
Conversion of domain values to plain JSON types

Used for validation results returned over the API and for audit metadata
stored in JSON columns.
"""
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel

JSONScalar = (str, int, float, bool)


def _key(key: Any) -> str:
    return str(key.value) if isinstance(key, Enum) else str(key)


def to_json_safe(value: Any) -> Any:
    """
    Recursively convert ``value`` into dicts, lists and JSON scalars.

    Enums become their value (checked before scalars, since str-based enums are
    also strings), dates become ISO strings and Decimals become floats. Frozen
    dataclasses such as RuleResult are expanded field by field. Sets are
    sorted so the output is stable.
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, JSONScalar):
        return value
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {_key(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [to_json_safe(item) for item in sorted(value, key=str)]
    if isinstance(value, BaseModel):
        return to_json_safe(value.model_dump())
    if is_dataclass(value) and not isinstance(value, type):
        return to_json_safe(asdict(value))
    return str(value)


def serialize_meta(meta: Union[Dict[str, Any], List[Any], None]) -> Union[Dict[str, Any], List[Any], None]:
    """Audit ``meta_json`` payload; bare values are wrapped as ``{"value": ...}``."""
    if meta is None:
        return None
    if not isinstance(meta, (dict, list)):
        meta = {"value": meta}
    return to_json_safe(meta)
