# contextualizer/core/translation/resolution.py
"""
core/translation/resolution.py
==============================

Request-scoped marker resolution.

A ResolutionContext lives for exactly one (story, country, language)
translation. It owns the cache that makes every marker resolve at most once,
which is what keeps a story internally consistent:

    {{student}} ... {{student}}           same name both times
    {{hospital}} within {{city}}          hospital picked inside that city
    {{victim}} sameAs {{student}}         alias copies the student's result

Resolution dispatches on `marker.kind` through HANDLERS. Handlers may resolve
other keys (parents, aliases, scope cities) through the same context; a key
that is re-entered while still being resolved raises CyclicReferenceError.

Contexts are cheap and never shared between requests.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable, Dict, List, Mapping, Optional

import structlog

from contextualizer.core.domain.context import DEFAULT_SOURCE_POPULATION, CountryContext
from contextualizer.core.domain.exceptions import CyclicReferenceError, MarkerNotFoundError
from contextualizer.core.domain.markers import (
    AliasMarker,
    ImageMarker,
    Marker,
    PersonMarker,
    SourceMarker,
    UnknownMarker,
)
from contextualizer.core.domain.segments import TranslationResult
from contextualizer.core.domain.story import Story
from contextualizer.core.translation.comparisons import resolve_casualties
from contextualizer.core.translation.dates import resolve_date, resolve_time
from contextualizer.core.translation.places import resolve_place
from contextualizer.core.translation.scaling import resolve_currency, resolve_number
from contextualizer.core.translation.selector import make_seed, select

logger = structlog.get_logger()


class ResolutionContext:
    def __init__(
        self,
        story_id: str,
        markers: Mapping[str, Marker],
        country: CountryContext,
        language: str = "en",
        source_population: int = DEFAULT_SOURCE_POPULATION,
    ):
        self.story_id = story_id
        self.markers: Dict[str, Marker] = dict(markers)
        self.country = country
        self.language = language
        self.source_population = source_population

        # key -> number of real (uncached) computations
        self.computations: Counter = Counter()
        self._cache: Dict[str, TranslationResult] = {}
        self._resolving: List[str] = []

    @classmethod
    def for_story(
        cls,
        story: Story,
        country: CountryContext,
        language: str = "en",
        source_population: int = DEFAULT_SOURCE_POPULATION,
    ) -> "ResolutionContext":
        return cls(story.id, story.markers, country, language, source_population)

    def __contains__(self, key: str) -> bool:
        return key in self.markers

    def seed(self, key: str, *extra: str) -> str:
        return make_seed(self.story_id, key, self.country.code, *extra)

    def resolve(self, key: str, referenced_by: Optional[str] = None) -> TranslationResult:
        """
        Resolved value of `key`, computed on first use and cached.

        Raises MarkerNotFoundError for keys the story does not define and
        CyclicReferenceError when `key` is already being resolved.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        marker = self.markers.get(key)
        if marker is None:
            raise MarkerNotFoundError(key, referenced_by or "<template>")

        if key in self._resolving:
            chain = self._resolving[self._resolving.index(key):] + [key]
            raise CyclicReferenceError(chain)

        self._resolving.append(key)
        try:
            result = HANDLERS[marker.kind](key, marker, self)
        finally:
            self._resolving.pop()

        self.computations[key] += 1
        self._cache[key] = result
        return result

    def resolve_optional(self, key: str, referenced_by: str) -> Optional[TranslationResult]:
        """Like resolve(), but a missing key is logged and yields None."""
        if key not in self.markers:
            logger.warning("marker_reference_missing", key=key, referenced_by=referenced_by)
            return None
        return self.resolve(key, referenced_by=referenced_by)

    def resolve_all(self) -> Dict[str, TranslationResult]:
        return {key: self.resolve(key) for key in self.markers}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

Handler = Callable[[str, Marker, ResolutionContext], TranslationResult]


def resolve_person(key: str, marker: PersonMarker, ctx: ResolutionContext) -> TranslationResult:
    pool = ctx.country.names.for_gender(marker.gender)

    if marker.regional_from:
        home = ctx.resolve_optional(marker.regional_from, referenced_by=key)
        city = ctx.country.places.find_city(home.city) if home is not None and home.city else None
        if city is not None and city.names.for_gender(marker.gender):
            pool = city.names.for_gender(marker.gender)

    if not pool:
        logger.warning("person_pool_empty", key=key, country=ctx.country.code, gender=marker.gender)
        return TranslationResult(value=marker.person)

    return TranslationResult(value=select(ctx.seed(key), pool), original=marker.person)


def resolve_alias(key: str, marker: AliasMarker, ctx: ResolutionContext) -> TranslationResult:
    if marker.same_as not in ctx.markers:
        raise MarkerNotFoundError(marker.same_as, key)
    return ctx.resolve(marker.same_as, referenced_by=key)


def resolve_source(key: str, marker: SourceMarker, ctx: ResolutionContext) -> TranslationResult:
    value = f"[{marker.number}]" if marker.number is not None else marker.text
    return TranslationResult(value=value)


def resolve_image(key: str, marker: ImageMarker, ctx: ResolutionContext) -> TranslationResult:
    return TranslationResult(value=marker.alt)


def resolve_unknown(key: str, marker: UnknownMarker, ctx: ResolutionContext) -> TranslationResult:
    logger.warning("marker_kind_unknown", key=key, fields=sorted(marker.raw))
    return TranslationResult(value=f"[{key}]")


HANDLERS: Dict[str, Handler] = {
    "person": resolve_person,
    "place": resolve_place,
    "number": resolve_number,
    "casualties": resolve_casualties,
    "date": resolve_date,
    "time": resolve_time,
    "currency": resolve_currency,
    "alias": resolve_alias,
    "source": resolve_source,
    "image": resolve_image,
    "unknown": resolve_unknown,
}
