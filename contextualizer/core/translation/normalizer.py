# contextualizer/core/translation/normalizer.py
"""
Segment normalizer.

Walks the token stream of one text field and emits the ordered list of
NormalizedSegments that every renderer (web, share images, exports) consumes.
The same `segment_for_marker` builder serves the runtime path and the
pre-translated re-parser, so both produce identical segment shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog

from contextualizer.core.domain.markers import (
    AliasMarker,
    CasualtiesMarker,
    ImageMarker,
    Marker,
    PersonMarker,
    SourceMarker,
)
from contextualizer.core.domain.segments import NormalizedSegment, SegmentStyle, SegmentType, TranslationResult
from contextualizer.core.domain.story import ImageReference, SourceReference, Story
from contextualizer.core.translation.parser import LiteralToken, MarkerToken, ParagraphBreakToken, parse_template
from contextualizer.core.translation.resolution import ResolutionContext

logger = structlog.get_logger()

PARAGRAPH_BREAK_TEXT = "\n\n"

SOURCE_NAMESPACE = "source"
IMAGE_NAMESPACE = "image"


@dataclass(frozen=True)
class TranslationOptions:
    language: str = "en"
    # Off: readers see the authored values, so "Original: X" tooltips are noise
    contextualization_enabled: bool = True


def paragraph_break() -> NormalizedSegment:
    return NormalizedSegment(text=PARAGRAPH_BREAK_TEXT, type=SegmentType.PARAGRAPH_BREAK)


def text_segment(text: str) -> NormalizedSegment:
    return NormalizedSegment(text=text, type=SegmentType.TEXT)


def normalize_text(
    text: str,
    ctx: ResolutionContext,
    story: Story,
    options: Optional[TranslationOptions] = None,
) -> List[NormalizedSegment]:
    """Translate one template field into normalized segments."""
    options = options or TranslationOptions(language=ctx.language)
    segments: List[NormalizedSegment] = []

    for token in parse_template(text).tokens:
        if isinstance(token, ParagraphBreakToken):
            segments.append(paragraph_break())
        elif isinstance(token, LiteralToken):
            segments.append(text_segment(token.text))
        elif isinstance(token, MarkerToken):
            segments.append(segment_for_marker(token.key, token.suffix, ctx, story, options))

    return segments


def segment_for_marker(
    key: str,
    suffix: Optional[str],
    ctx: ResolutionContext,
    story: Story,
    options: TranslationOptions,
) -> NormalizedSegment:
    if key == SOURCE_NAMESPACE:
        return _citation_segment(story.find_source(suffix) if suffix else None, suffix)
    if key == IMAGE_NAMESPACE:
        return _image_segment(story.find_image(suffix) if suffix else None, suffix)

    if key not in ctx:
        logger.warning("marker_reference_unknown", key=key, story_id=story.id)
        return text_segment(f"[{key}]")

    result = ctx.resolve(key)
    marker = _effective_marker(key, ctx)

    if suffix == "age":
        if isinstance(marker, PersonMarker) and marker.age is not None:
            return text_segment(str(marker.age))
        logger.warning("marker_age_missing", key=key)

    elif suffix == "comparable":
        if isinstance(marker, CasualtiesMarker):
            if result.comparison:
                return NormalizedSegment(
                    text=result.comparison,
                    tooltip=result.comparison_explanation,
                    type=SegmentType.COMPARISON,
                    style=SegmentStyle.ITALIC_COMPARISON,
                )
            # Nothing to compare against; an empty segment keeps the number from repeating
            return text_segment("")
        logger.warning("marker_comparable_not_casualties", key=key, kind=marker.kind)

    elif suffix == "original":
        return text_segment(result.original or result.value)
    elif suffix == "translated":
        return text_segment(result.value)
    elif suffix is not None:
        logger.debug("marker_suffix_ignored", key=key, suffix=suffix)

    if isinstance(marker, SourceMarker):
        return _legacy_citation_segment(marker)
    if isinstance(marker, ImageMarker):
        return _image_segment_from(_drop_none({
            "src": marker.src,
            "alt": marker.alt,
            "caption": marker.caption,
            "content_warning": marker.content_warning,
            "credit": marker.credit,
            "credit_url": marker.credit_url,
        }))

    return marker_segment(result, SegmentType.coerce(marker.kind), options)


def marker_segment(
    result: TranslationResult,
    segment_type: SegmentType,
    options: TranslationOptions,
) -> NormalizedSegment:
    tooltip = result.explanation
    if tooltip is None and result.original and options.contextualization_enabled:
        tooltip = f"Original: {result.original}"

    return NormalizedSegment(
        text=result.value,
        original=result.original,
        tooltip=tooltip,
        type=segment_type,
        style=SegmentStyle.STRIKETHROUGH_MUTED if result.original else None,
    )


# ---------------------------------------------------------------------------
# Sources & images
# ---------------------------------------------------------------------------


def _citation_segment(source: Optional[SourceReference], source_id: Optional[str]) -> NormalizedSegment:
    if source is None:
        logger.warning("source_reference_unknown", source_id=source_id)
        return text_segment(f"[source:{source_id or ''}]")
    return NormalizedSegment(
        text=f"[{source.number}]",
        tooltip=source.title,
        type=SegmentType.SOURCE,
        style=SegmentStyle.BOLD_PRIMARY,
        metadata=_drop_none({"url": source.url, "title": source.title}),
    )


def _legacy_citation_segment(marker: SourceMarker) -> NormalizedSegment:
    label = marker.number if marker.number is not None else marker.text
    return NormalizedSegment(
        text=f"[{label}]",
        tooltip=marker.title,
        type=SegmentType.SOURCE,
        style=SegmentStyle.BOLD_PRIMARY,
        metadata=_drop_none({"url": marker.url, "title": marker.title}),
    )


def _image_segment(image: Optional[ImageReference], image_id: Optional[str]) -> NormalizedSegment:
    if image is None:
        logger.warning("image_reference_unknown", image_id=image_id)
        return text_segment(f"[image:{image_id or ''}]")
    return _image_segment_from(image.model_dump(exclude={"id"}, exclude_none=True))


def _image_segment_from(metadata: Dict[str, Any]) -> NormalizedSegment:
    return NormalizedSegment(text="", type=SegmentType.IMAGE, metadata=metadata)


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _effective_marker(key: str, ctx: ResolutionContext) -> Marker:
    """The marker an alias chain ends at (the key's own marker otherwise)."""
    marker = ctx.markers[key]
    seen = {key}
    while isinstance(marker, AliasMarker) and marker.same_as in ctx.markers and marker.same_as not in seen:
        seen.add(marker.same_as)
        marker = ctx.markers[marker.same_as]
    return marker
