"""Utility helpers shared by the sync configuration loader."""

from __future__ import annotations

import re
import typing as typ

from .models import SectionConfig, SyncConfigError

DEFAULT_EXCLUDED_FOLDERS = ("images", "i18n", ".github")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_names(value: str | list[object] | None) -> list[str]:
    """Normalize a whitespace string or list into non-empty strings."""
    if isinstance(value, str):
        return [segment for segment in value.split() if segment]
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return normalized
    return []


def _coerce_bool(value: object, *, default: bool) -> bool:
    match value:
        case None:
            return default
        case bool():
            return value
        case str() as text:
            return text.strip().lower() in {"1", "true", "yes", "on"}
        case _:
            return bool(value)


def _compile_pattern(value: object, *, key: str) -> re.Pattern[str] | None:
    """Compile a changelog pattern, reporting the owning pipeline on errors."""
    text = _optional_str(value)
    if text is None:
        return None
    try:
        return re.compile(text)
    except re.error as exc:
        msg = f"Pipeline '{key}' has an invalid changelog_pattern: {exc}"
        raise SyncConfigError(msg) from exc


def _build_sections(payload: object, *, key: str) -> list[SectionConfig]:
    """Build ordered SectionConfig entries from a YAML list of mappings."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        msg = f"Pipeline '{key}' sections must be a list."
        raise SyncConfigError(msg)
    sections: list[SectionConfig] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        section = typ.cast("dict[str, typ.Any]", item)
        name = _optional_str(section.get("name"))
        if not name:
            msg = f"Pipeline '{key}' has a section without a name."
            raise SyncConfigError(msg)
        sections.append(
            SectionConfig(name=name, pages=_normalize_names(section.get("pages")))
        )
    return sections


__all__ = [
    "DEFAULT_EXCLUDED_FOLDERS",
    "_build_sections",
    "_coerce_bool",
    "_compile_pattern",
    "_normalize_names",
    "_optional_str",
]
