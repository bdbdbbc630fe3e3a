# contextualizer/core/translation/comparisons.py
"""
core/translation/comparisons.py
===============================

Casualty scaling and historical comparisons.

Casualty figures are always scaled to the reader's population, then matched
against the target country's own history so the number lands somewhere
familiar:

    36,500 killed (IR)  ->  4,380 killed (CZ)  ->  "13 times the Lidice massacre"

The matched event is the one whose casualty count is closest to the scaled
value (first one wins a tie). The ratio R = scaled / event.casualties picks
the phrase:

    0.85 <= R <= 1.15   approximately <event>
    R <= 0.35           a third of <event>
    0.35 < R <= 0.55    half of <event>
    0.55 < R < 0.85     two-thirds of <event>
    R > 1.15            twice / three times / <N> times <event>

Phrases come from per-language phrasebooks (English fallback) and pass
through simple article rules. The explanation is always English: it is a
debugging aid, not reader-facing prose.

A casualties marker may instead name another casualties marker
(`comparedTo`); the phrase is then relative ("twice as many as ...").
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

import structlog
from babel.numbers import format_decimal

from contextualizer.core.domain.context import ComparableEvent
from contextualizer.core.domain.markers import CasualtiesMarker, ComparisonCategory, PlaceMarker
from contextualizer.core.domain.segments import TranslationResult
from contextualizer.core.translation.dates import babel_locale, base_language
from contextualizer.core.translation.scaling import ScaledValue, round_half_up, scale_value

if TYPE_CHECKING:  # pragma: no cover
    from contextualizer.core.translation.resolution import ResolutionContext

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Phrasebooks
# ---------------------------------------------------------------------------

_PHRASE_KEYS = (
    "approximately",
    "third",
    "half",
    "two_thirds",
    "twice",
    "three_times",
    "n_times",
    "more_than",
)


def _book(*templates: str) -> Dict[str, str]:
    return dict(zip(_PHRASE_KEYS, templates))


PHRASEBOOKS: Dict[str, Dict[str, str]] = {
    "en": _book(
        "approximately {event}", "a third of {event}", "half of {event}",
        "two-thirds of {event}", "twice {event}", "three times {event}",
        "{n} times {event}", "more than {event}",
    ),
    "de": _book(
        "etwa {event}", "ein Drittel von {event}", "die Hälfte von {event}",
        "zwei Drittel von {event}", "das Doppelte von {event}",
        "das Dreifache von {event}", "das {n}-Fache von {event}", "mehr als {event}",
    ),
    "fr": _book(
        "environ {event}", "un tiers de {event}", "la moitié de {event}",
        "les deux tiers de {event}", "deux fois {event}", "trois fois {event}",
        "{n} fois {event}", "plus que {event}",
    ),
    "es": _book(
        "aproximadamente {event}", "un tercio de {event}", "la mitad de {event}",
        "dos tercios de {event}", "el doble de {event}", "el triple de {event}",
        "{n} veces {event}", "más que {event}",
    ),
    "it": _book(
        "circa {event}", "un terzo di {event}", "la metà di {event}",
        "due terzi di {event}", "il doppio di {event}", "il triplo di {event}",
        "{n} volte {event}", "più di {event}",
    ),
    "pt": _book(
        "aproximadamente {event}", "um terço de {event}", "metade de {event}",
        "dois terços de {event}", "o dobro de {event}", "o triplo de {event}",
        "{n} vezes {event}", "mais do que {event}",
    ),
    "nl": _book(
        "ongeveer {event}", "een derde van {event}", "de helft van {event}",
        "twee derde van {event}", "twee keer {event}", "drie keer {event}",
        "{n} keer {event}", "meer dan {event}",
    ),
    "cs": _book(
        "přibližně {event}", "třetina {event}", "polovina {event}",
        "dvě třetiny {event}", "dvakrát {event}", "třikrát {event}",
        "{n}krát {event}", "více než {event}",
    ),
    "sv": _book(
        "ungefär {event}", "en tredjedel av {event}", "hälften av {event}",
        "två tredjedelar av {event}", "dubbelt så många som {event}",
        "tre gånger {event}", "{n} gånger {event}", "fler än {event}",
    ),
    "pl": _book(
        "około {event}", "jedna trzecia {event}", "połowa {event}",
        "dwie trzecie {event}", "dwukrotność {event}", "trzykrotność {event}",
        "{n} razy {event}", "więcej niż {event}",
    ),
}

# comparedTo mode; languages without an entry use English
RELATIVE_PHRASEBOOKS: Dict[str, Dict[str, str]] = {
    "en": {
        "n_times": "more than {n} times as many as {other}",
        "twice": "twice as many as {other}",
        "more": "more than {other}",
        "about": "about as many as {other}",
        "fewer": "fewer than {other}",
    },
}

# Articles that open an event name and are lowercased mid-sentence
_LEADING_ARTICLES: Dict[str, Tuple[str, ...]] = {
    "en": ("The",),
    "de": ("Der", "Die", "Das"),
    "fr": ("Les", "Le", "La", "L'"),
    "es": ("Los", "Las", "El", "La"),
    "it": ("Gli", "Il", "Lo", "La", "Le", "I", "L'"),
    "pt": ("Os", "As", "O", "A"),
    "nl": ("De", "Het"),
}

_CONTRACTIONS: Dict[str, List[Tuple[re.Pattern, str]]] = {
    "fr": [(re.compile(r"\bde le\b"), "du"), (re.compile(r"\bde les\b"), "des")],
    "es": [(re.compile(r"\bde el\b"), "del")],
    "pt": [
        (re.compile(r"\bde o\b"), "do"),
        (re.compile(r"\bde a\b"), "da"),
        (re.compile(r"\bde os\b"), "dos"),
        (re.compile(r"\bde as\b"), "das"),
    ],
    "it": [
        (re.compile(r"\bdi il\b"), "del"),
        (re.compile(r"\bdi lo\b"), "dello"),
        (re.compile(r"\bdi la\b"), "della"),
        (re.compile(r"\bdi i\b"), "dei"),
        (re.compile(r"\bdi gli\b"), "degli"),
        (re.compile(r"\bdi le\b"), "delle"),
        (re.compile(r"\bdi l'"), "dell'"),
    ],
}


def phrasebook(language: str) -> Dict[str, str]:
    return PHRASEBOOKS.get(base_language(language), PHRASEBOOKS["en"])


def _event_reference(event: ComparableEvent, language: str) -> str:
    name = event.display_name.strip()
    for article in _LEADING_ARTICLES.get(language, ()):
        if article.endswith("'"):
            if name.startswith(article):
                return article.lower() + name[len(article):]
        elif name.startswith(article + " "):
            return article.lower() + name[len(article):]
    return name


def apply_article_rules(phrase: str, language: str) -> str:
    for pattern, replacement in _CONTRACTIONS.get(language, ()):
        phrase = pattern.sub(replacement, phrase)
    return phrase


# ---------------------------------------------------------------------------
# Event matching
# ---------------------------------------------------------------------------


def find_comparable_event(
    scaled: int,
    events: Sequence[ComparableEvent],
    category: Optional[ComparisonCategory] = None,
) -> Optional[ComparableEvent]:
    """
    Event whose casualty count is nearest to `scaled`.

    A category narrows the candidates; when nothing matches it, all events
    are considered. Ties go to the first event in table order.
    """
    candidates = list(events)
    if category is not None and category is not ComparisonCategory.ANY:
        filtered = [e for e in candidates if e.category == category.value]
        if filtered:
            candidates = filtered

    best: Optional[ComparableEvent] = None
    for event in candidates:
        if best is None or abs(event.casualties - scaled) < abs(best.casualties - scaled):
            best = event
    return best


def comparison_phrase(scaled: int, event: ComparableEvent, language: str = "en") -> str:
    language = base_language(language)
    book = phrasebook(language)
    ratio = scaled / event.casualties
    reference = _event_reference(event, language)

    if 0.85 <= ratio <= 1.15:
        template = book["approximately"]
    elif ratio <= 0.35:
        template = book["third"]
    elif ratio <= 0.55:
        template = book["half"]
    elif ratio < 0.85:
        template = book["two_thirds"]
    else:
        multiplier = round_half_up(ratio)
        if multiplier <= 1:
            template = book["more_than"]
        elif multiplier == 2:
            template = book["twice"]
        elif multiplier == 3:
            template = book["three_times"]
        else:
            template = book["n_times"].replace("{n}", str(multiplier))

        if multiplier > 1 and language == "en" and event.full_name is None and not reference.startswith("the "):
            # Short names read as a definite event after a multiplier
            reference = f"the {reference}"

    return apply_article_rules(template.format(event=reference), language)


def comparison_explanation(scaled: int, event: ComparableEvent) -> str:
    """English arithmetic behind a comparison phrase."""
    ratio = scaled / event.casualties
    ratio_text = f"{ratio:.2f}x more" if ratio >= 1 else f"{ratio * 100:.0f}% of"
    when = f" in {event.year}" if event.year else ""
    return (
        f"Comparison: {scaled:,} casualties vs. {event.display_name} "
        f"({event.casualties:,} casualties{when}) = {ratio_text}"
    )


def relative_phrase(value: int, other_value: int, other_label: str, language: str = "en") -> Optional[str]:
    """Phrase relating `value` to another casualty figure; None when the other is zero."""
    if other_value <= 0:
        return None
    book = RELATIVE_PHRASEBOOKS.get(base_language(language), RELATIVE_PHRASEBOOKS["en"])
    ratio = value / other_value

    if ratio >= 3:
        return book["n_times"].format(n=int(ratio), other=other_label)
    if ratio >= 1.8:
        return book["twice"].format(other=other_label)
    if ratio >= 1.2:
        return book["more"].format(other=other_label)
    if ratio >= 0.8:
        return book["about"].format(other=other_label)
    return book["fewer"].format(other=other_label)


# ---------------------------------------------------------------------------
# Marker handler
# ---------------------------------------------------------------------------


def scale_casualties(key: str, marker: CasualtiesMarker, ctx: "ResolutionContext") -> ScaledValue:
    """
    National scaling by default. City scope replaces the target population
    with the reader-country city's population (the authored figure when the
    city kept its original name); the source country population stays the
    denominator either way.
    """
    target = ctx.country.population

    if marker.scope == "city" and marker.scope_city:
        city_marker = ctx.markers.get(marker.scope_city)
        authored_population = city_marker.population if isinstance(city_marker, PlaceMarker) else None
        city = ctx.resolve_optional(marker.scope_city, referenced_by=key)
        city_population = city.population if city is not None and city.population else authored_population
        if city_population:
            target = city_population
        else:
            logger.warning("casualties_scope_city_unusable", key=key, scope_city=marker.scope_city)

    return scale_value(marker.casualties, target, ctx.source_population)


def resolve_casualties(key: str, marker: CasualtiesMarker, ctx: "ResolutionContext") -> TranslationResult:
    scaled = scale_casualties(key, marker, ctx)
    locale = babel_locale(ctx.language)

    comparison: Optional[str] = None
    explanation: Optional[str] = None

    if marker.compared_to:
        other = ctx.resolve_optional(marker.compared_to, referenced_by=key)
        if other is not None and other.amount:
            comparison = relative_phrase(scaled.value, other.amount, other.value, ctx.language)
            explanation = (
                f"Comparison: {scaled.value:,} vs. {other.amount:,} "
                f"= {scaled.value / other.amount:.2f}x"
            )
    elif marker.comparable is not None:
        event = find_comparable_event(scaled.value, ctx.country.comparable_events, marker.comparable)
        if event is not None:
            comparison = comparison_phrase(scaled.value, event, ctx.language)
            explanation = comparison_explanation(scaled.value, event)
        else:
            logger.info("comparable_event_missing", key=key, country=ctx.country.code)

    return TranslationResult(
        value=format_decimal(scaled.value, locale=locale),
        original=format_decimal(marker.casualties, locale=locale),
        explanation=scaled.explanation,
        comparison=comparison,
        comparison_explanation=explanation,
        amount=scaled.value,
    )
