"""Config schema validation helpers."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, Tuple

import jsonschema


def default_schema_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "config-schema.json")


def validate_config_schema(config_data: Dict[str, Any], schema_path: Optional[str] = None) -> Tuple[bool, Optional[str]]:
    if schema_path is None:
        schema_path = default_schema_path()

    if not os.path.exists(schema_path):
        return True, None

    with open(schema_path, "r", encoding="utf-8") as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=config_data, schema=schema)
        return True, None
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        return False, f"{location}: {exc.message}"
