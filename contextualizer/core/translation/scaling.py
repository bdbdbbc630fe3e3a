# contextualizer/core/translation/scaling.py
"""
Population scaling for quantities.

    scaled = round(base × (target_population / source_population) × dampening)

Rounding is half-up (not Python's banker's rounding) so that every renderer
produces the same integers. Each step also yields an English arithmetic
explanation whose final number is exactly the returned value; tooltips show
it verbatim.

Number markers opt into scaling (`scaled: true`) and may add a bounded,
seeded variance; currency markers convert rial amounts with the country's
exchange rate. Casualty scaling lives with the comparison logic in
`comparisons.py` because it is mandatory and feeds event matching.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from contextualizer.core.domain.markers import CurrencyMarker, NumberMarker, authored_value
from contextualizer.core.domain.segments import TranslationResult
from contextualizer.core.translation.selector import seeded_random

if TYPE_CHECKING:  # pragma: no cover
    from contextualizer.core.translation.resolution import ResolutionContext

Number = Union[int, float]


@dataclass(frozen=True, slots=True)
class ScaledValue:
    value: int
    explanation: str


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fmt(value: Number) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,}"
    return f"{int(value):,}"


def scale_value(
    base: Number,
    target_population: int,
    source_population: int,
    dampening: float = 1.0,
) -> ScaledValue:
    """Scale `base` by the population ratio, optionally dampened."""
    if source_population <= 0:
        raise ValueError("source_population must be positive")

    ratio = target_population / source_population
    value = round_half_up(base * ratio * dampening)

    explanation = f"{_fmt(base)} × ({target_population:,} / {source_population:,})"
    if dampening != 1.0:
        explanation += f" × {dampening:g}"
    explanation += f" = {value:,}"
    return ScaledValue(value=value, explanation=explanation)


def variance_adjustment(variance: int, seed: str) -> int:
    """Seeded offset in [-variance, variance)."""
    return math.floor((seeded_random(seed) - 0.5) * 2 * variance)


def apply_variance(value: int, variance: int, seed: str) -> ScaledValue:
    adjustment = variance_adjustment(variance, seed)
    result = value + adjustment
    sign = "+" if adjustment >= 0 else "-"
    explanation = f"{value:,} {sign} {abs(adjustment):,} (variance ±{variance}) = {result:,}"
    return ScaledValue(value=result, explanation=explanation)


# ---------------------------------------------------------------------------
# Marker handlers
# ---------------------------------------------------------------------------


def resolve_number(key: str, marker: NumberMarker, ctx: "ResolutionContext") -> TranslationResult:
    original = authored_value(marker)
    value: Number = marker.number
    steps = []

    if marker.scaled:
        scaled = scale_value(
            marker.number,
            ctx.country.population,
            ctx.source_population,
            marker.scale_factor,
        )
        value = scaled.value
        steps.append(scaled.explanation)

    if marker.variance:
        varied = apply_variance(round_half_up(value), marker.variance, ctx.seed(key))
        value = varied.value
        steps.append(varied.explanation)

    display = str(value) if steps else original
    if display == original:
        return TranslationResult(value=display, amount=round_half_up(value))

    return TranslationResult(
        value=display,
        original=original,
        explanation="; ".join(steps),
        amount=round_half_up(value),
    )


def resolve_currency(key: str, marker: CurrencyMarker, ctx: "ResolutionContext") -> TranslationResult:
    converted = round_half_up(marker.currency * ctx.country.rial_to_local)
    return TranslationResult(
        value=f"{ctx.country.currency_symbol}{converted:,}",
        original=authored_value(marker),
        explanation=(
            f"{_fmt(marker.currency)} Rial × {ctx.country.rial_to_local:g} = "
            f"{ctx.country.currency_symbol}{converted:,}"
        ),
        amount=converted,
    )
