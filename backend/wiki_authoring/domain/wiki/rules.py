"""Shape rules for draft content, checked before anything is persisted."""
from __future__ import annotations
import math
from typing import Any, Mapping

from wiki_authoring.domain.common.result import ErrorKind, Result
from wiki_authoring.domain.wiki.models import DraftContent

_SCALAR_TYPES = (str, int, float, bool, type(None))


def _has_non_finite(value: Any) -> bool:
    """True if a NaN or infinity appears anywhere in value; those cannot be stored as JSON."""
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, dict):
        return any(_has_non_finite(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(_has_non_finite(v) for v in value)
    return False


def validate_draft_content(data: Mapping[str, Any]) -> Result[DraftContent]:
    """
    Validates the three content fields and returns a fresh DraftContent.

    - sections: a list of objects (open-ended key/value records)
    - counters: a flat mapping of name -> scalar
    - hidden_section_ids: a list of strings, treated as a set (duplicates dropped, order kept)

    Missing fields default to empty. Nothing about the content's meaning is checked.
    """
    if not isinstance(data, Mapping):
        return Result.fail("Draft content must be an object.", ErrorKind.INVALID_CONTENT)

    sections = data.get("sections")
    if sections is None:
        sections = []
    if not isinstance(sections, list):
        return Result.fail("'sections' must be a list of objects.", ErrorKind.INVALID_CONTENT)
    for index, section in enumerate(sections):
        if not isinstance(section, dict):
            return Result.fail(
                f"'sections[{index}]' must be an object, got {type(section).__name__}.",
                ErrorKind.INVALID_CONTENT,
            )
        if _has_non_finite(section):
            return Result.fail(
                f"'sections[{index}]' contains a non-finite number (NaN or Infinity).",
                ErrorKind.INVALID_CONTENT,
            )

    counters = data.get("counters")
    if counters is None:
        counters = {}
    if not isinstance(counters, dict):
        return Result.fail("'counters' must be an object.", ErrorKind.INVALID_CONTENT)
    for name, value in counters.items():
        if not isinstance(name, str):
            return Result.fail("'counters' keys must be strings.", ErrorKind.INVALID_CONTENT)
        if not isinstance(value, _SCALAR_TYPES):
            return Result.fail(
                f"'counters.{name}' must be a scalar value; nested structures are not allowed.",
                ErrorKind.INVALID_CONTENT,
            )
        if _has_non_finite(value):
            return Result.fail(
                f"'counters.{name}' must be a finite number (NaN and Infinity are not allowed).",
                ErrorKind.INVALID_CONTENT,
            )

    hidden = data.get("hidden_section_ids")
    if hidden is None:
        hidden = []
    if not isinstance(hidden, (list, tuple, set, frozenset)):
        return Result.fail("'hidden_section_ids' must be a list of strings.", ErrorKind.INVALID_CONTENT)
    unique_hidden: list[str] = []
    for section_id in hidden:
        if not isinstance(section_id, str):
            return Result.fail("'hidden_section_ids' must contain only strings.", ErrorKind.INVALID_CONTENT)
        if section_id not in unique_hidden:
            unique_hidden.append(section_id)

    content = DraftContent(sections=sections, counters=counters, hidden_section_ids=unique_hidden)
    return Result.ok(content.copy())
