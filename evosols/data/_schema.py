"""Shared JSON loading with schema validation for packaged data files."""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any

import jsonschema

from evosols.core.errors import DataLoadError
from evosols.core.paths import SCHEMA

def load_validated(path: Path, schema_name: str) -> Any:
    if not path.exists():
        raise DataLoadError(str(path), "file missing")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DataLoadError(str(path), f"json: {e}") from e
    schema = json.loads((SCHEMA / schema_name).read_text(encoding="utf-8"))
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(str(path), f"schema: {e.message}") from e
    return data
