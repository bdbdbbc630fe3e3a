# contextualizer/core/translation/places.py
"""
Place hierarchy resolution.

A facility marker (university, hospital, protest landmark, ...) that declares
a parent with `within` must land inside the city its parent resolved to, so a
story never puts "Charles University" in Brno. Resolution order:

    1. parent city      resolve `within`, look up the city record by the
                        resolved name, pick from its facility list
    2. size class       pick a city matching the declared size (and capital
                        flag) that has the facility, then the facility
    3. any city         pick among all cities that have the facility
    4. generic pool     the country-wide generic list for the facility kind
    5. authored value   the original text, without an 'original' annotation

City markers (no facility kind) pick a city record directly by size class and
capital flag; without a size class every city is a candidate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog

from contextualizer.core.domain.context import CityRecord
from contextualizer.core.domain.markers import AliasMarker, PlaceMarker
from contextualizer.core.domain.segments import TranslationResult
from contextualizer.core.translation.selector import select

if TYPE_CHECKING:  # pragma: no cover
    from contextualizer.core.translation.resolution import ResolutionContext

logger = structlog.get_logger()


def resolve_place(key: str, marker: PlaceMarker, ctx: "ResolutionContext") -> TranslationResult:
    if marker.facility_kind is None:
        return _resolve_city(key, marker, ctx)
    return _resolve_facility(key, marker, ctx)


# ---------------------------------------------------------------------------
# Cities
# ---------------------------------------------------------------------------


def _resolve_city(key: str, marker: PlaceMarker, ctx: "ResolutionContext") -> TranslationResult:
    candidates = ctx.country.places.cities_matching(marker.size_class, marker.capital)
    if not candidates:
        return _keep_authored(key, marker, ctx, reason="no_matching_city")

    city = select(ctx.seed(key), candidates)
    return _city_result(marker, city.name, city)


def _city_result(marker: PlaceMarker, value: str, city: CityRecord) -> TranslationResult:
    return TranslationResult(
        value=value,
        original=marker.place,
        city=city.name,
        population=city.population,
    )


# ---------------------------------------------------------------------------
# Facilities
# ---------------------------------------------------------------------------


def _resolve_facility(key: str, marker: PlaceMarker, ctx: "ResolutionContext") -> TranslationResult:
    kind = marker.facility_kind
    places = ctx.country.places

    parent_city = _parent_city(key, marker, ctx)
    if parent_city is not None:
        names = parent_city.facilities(kind)
        if names:
            return _city_result(marker, select(ctx.seed(key), names), parent_city)
        logger.info(
            "place_parent_city_lacks_facility",
            key=key,
            city=parent_city.name,
            facility_kind=kind.value,
        )

    if marker.size_class is not None:
        sized = _with_facility(places.cities_matching(marker.size_class, marker.capital), marker)
        if sized:
            return _pick_in_city(key, marker, ctx, sized)

    stocked = _with_facility(places.cities, marker)
    if stocked:
        return _pick_in_city(key, marker, ctx, stocked)

    generic = places.generic.facilities(kind)
    if generic:
        return TranslationResult(value=select(ctx.seed(key), generic), original=marker.place)

    return _keep_authored(key, marker, ctx, reason="no_facility_candidates")


def _parent_city(key: str, marker: PlaceMarker, ctx: "ResolutionContext") -> Optional[CityRecord]:
    if not marker.within:
        return None

    parent_marker = ctx.markers.get(marker.within)
    if parent_marker is not None and not isinstance(parent_marker, (PlaceMarker, AliasMarker)):
        logger.warning(
            "place_parent_not_place",
            key=key,
            within=marker.within,
            parent_kind=parent_marker.kind,
        )
        return None

    parent = ctx.resolve_optional(marker.within, referenced_by=key)
    if parent is None:
        return None
    return ctx.country.places.find_city(parent.city or parent.value)


def _with_facility(cities: List[CityRecord], marker: PlaceMarker) -> List[CityRecord]:
    return [c for c in cities if c.facilities(marker.facility_kind)]


def _pick_in_city(
    key: str,
    marker: PlaceMarker,
    ctx: "ResolutionContext",
    cities: List[CityRecord],
) -> TranslationResult:
    city = select(ctx.seed(key, "city"), cities)
    return _city_result(marker, select(ctx.seed(key), city.facilities(marker.facility_kind)), city)


def _keep_authored(
    key: str,
    marker: PlaceMarker,
    ctx: "ResolutionContext",
    reason: str,
) -> TranslationResult:
    logger.warning(
        "place_fallback_original",
        key=key,
        country=ctx.country.code,
        facility_kind=marker.facility_kind.value if marker.facility_kind else None,
        size_class=marker.size_class.value if marker.size_class else None,
        reason=reason,
    )
    return TranslationResult(value=marker.place, population=marker.population)
