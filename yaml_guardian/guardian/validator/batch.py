"""Helpers for validating a directory tree of YAML files."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

from guardian.validator.models import ValidateOptions

YAML_SUFFIXES = {".yaml", ".yml"}


def find_yaml_files(root: str | Path) -> list[Path]:
    """Every ``*.yaml``/``*.yml`` file below *root*, sorted by path."""
    base = Path(root)
    if base.is_file():
        return [base] if base.suffix.lower() in YAML_SUFFIXES else []
    return sorted(
        p for p in base.rglob("*")
        if p.is_file() and p.suffix.lower() in YAML_SUFFIXES
    )


def cache_key(content: str, options: ValidateOptions) -> str:
    """SHA-256 over the content and every option that can change the verdict."""
    basis = {
        "filename": options.filename,
        "provider": options.provider.value if options.provider else None,
        "ruleset_path": options.ruleset_path,
        "parse_timeout_ms": options.parse_timeout_ms,
        "relax_security": options.relax_security,
        "allow_anchors": options.allow_anchors,
        "allow_aliases": options.allow_aliases,
        "allowed_tags": sorted(options.allowed_tags),
    }
    digest = hashlib.sha256()
    digest.update(content.encode("utf-8"))
    digest.update(json.dumps(basis, sort_keys=True).encode("utf-8"))
    return digest.hexdigest()
