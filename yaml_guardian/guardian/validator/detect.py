"""Dialect detection: decide which engine a document belongs to."""

from __future__ import annotations

import logging
from typing import Any

from guardian.errors import ParseFailed
from guardian.validator.models import Dialect
from guardian.validator.parser import load_document

logger = logging.getLogger(__name__)

TEMPLATE_VERSION_KEY = "AWSTemplateFormatVersion"
PIPELINE_MARKERS = ("steps", "jobs", "stages", "pool", "trigger", "pr", "variables")


def detect_document(document: Any) -> Dialect:
    """Classify an already-parsed document.

    Template markers win over pipeline markers because template documents
    are structurally more specific.
    """
    if not isinstance(document, dict):
        return Dialect.generic
    if TEMPLATE_VERSION_KEY in document or isinstance(document.get("Resources"), dict):
        return Dialect.template
    if any(key in document for key in PIPELINE_MARKERS):
        return Dialect.pipeline
    return Dialect.generic


def detect(content: str, forced: Dialect | str | None = None) -> Dialect:
    """Return *forced* untouched, or parse *content* and classify it."""
    if forced is not None:
        return Dialect(forced)
    try:
        document = load_document(content)
    except ParseFailed as e:
        logger.debug("Detection fell back to generic: %s", e)
        return Dialect.generic
    return detect_document(document)
