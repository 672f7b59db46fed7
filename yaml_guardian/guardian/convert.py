"""YAML <-> JSON conversion helpers used by the UI layer."""

from __future__ import annotations

import datetime
import json
from typing import Any

from ruamel.yaml.comments import TaggedScalar

from guardian.validator.parser import dump_document, load_document


def _json_default(value: Any) -> Any:
    if isinstance(value, TaggedScalar):
        return value.value
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def yaml_to_json(text: str) -> str:
    """Convert YAML to 2-space indented JSON.

    Raises ParseSyntaxError for malformed YAML. Tagged scalars lose their tag.
    """
    return json.dumps(load_document(text), indent=2, default=_json_default)


def json_to_yaml(text: str) -> str:
    """Convert JSON to block-style YAML. Raises ValueError for malformed JSON."""
    data = json.loads(text)
    return dump_document(data)
