# contextualizer/core/translation/dates.py
"""Locale handling for dates and grouped numbers (Babel)."""

from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

import structlog
from babel import Locale, UnknownLocaleError
from babel.dates import format_date

from contextualizer.core.domain.markers import DateMarker, TimeMarker
from contextualizer.core.domain.segments import TranslationResult

if TYPE_CHECKING:  # pragma: no cover
    from contextualizer.core.translation.resolution import ResolutionContext

logger = structlog.get_logger()

DEFAULT_LOCALE = "en_US"

# Reader language -> Babel locale identifier, where the bare code is not enough
LOCALE_ALIASES = {
    "en": "en_US",
    "no": "nb",
}

DATE_FORMATS = ("short", "medium", "long", "full")


def base_language(language: Optional[str]) -> str:
    """'pt-BR' -> 'pt'."""
    if not language:
        return "en"
    return language.replace("_", "-").split("-")[0].lower()


@lru_cache(maxsize=64)
def babel_locale(language: Optional[str]) -> Locale:
    code = base_language(language)
    try:
        return Locale.parse(LOCALE_ALIASES.get(code, code))
    except (UnknownLocaleError, ValueError):
        logger.warning("locale_unknown", language=language, fallback=DEFAULT_LOCALE)
        return Locale.parse(DEFAULT_LOCALE)


def parse_iso_date(value: str) -> Optional[date]:
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def format_date_localized(value: str, language: str = "en", format: Optional[str] = None) -> str:
    """
    Long-form localized date ("September 20, 2022", "20. září 2022").

    Values that are not ISO dates ("autumn 2022") are returned unchanged.
    """
    parsed = parse_iso_date(value)
    if parsed is None:
        logger.debug("date_not_iso", value=value)
        return value
    style = format if format in DATE_FORMATS else "long"
    return format_date(parsed, format=style, locale=babel_locale(language))


# ---------------------------------------------------------------------------
# Marker handlers
# ---------------------------------------------------------------------------


def resolve_date(key: str, marker: DateMarker, ctx: "ResolutionContext") -> TranslationResult:
    return TranslationResult(value=format_date_localized(marker.date, ctx.language, marker.format))


def resolve_time(key: str, marker: TimeMarker, ctx: "ResolutionContext") -> TranslationResult:
    return TranslationResult(value=marker.time)
