# contextualizer/core/translation/pretranslated.py
"""
Pre-translated re-parser.

Stories translated ahead of time (prose by a human or MT pass, markers
already substituted) arrive in a tagged format:

    [[MARKER:person:student:Raha|Lina]]
    [[MARKER:number:protesters:1000|3894|1,000 × (331,000,000 / 85,000,000) = 3,894]]
    [[COMPARISON:(13 times Lidice)|(13krát Lidice)|Comparison: 4,420 casualties vs. ...]]

Anything that could not be resolved ahead of time (locale dates, citations,
images) is left as a `{{key}}` / `{{key:suffix}}` placeholder and resolved
here through the ResolutionContext, exactly like the runtime path.
"""

from __future__ import annotations

import re
from typing import List, Optional

from contextualizer.core.domain.segments import NormalizedSegment, SegmentStyle, SegmentType
from contextualizer.core.domain.story import Story
from contextualizer.core.translation.normalizer import (
    TranslationOptions,
    paragraph_break,
    segment_for_marker,
    text_segment,
)
from contextualizer.core.translation.parser import ParseDiagnostic, check_literal, split_paragraphs
from contextualizer.core.translation.resolution import ResolutionContext

TAGGED_PATTERN = re.compile(
    r"(\[\[MARKER:([\w-]+):([\w-]+):([^|\]]+)\|([^|\]]+)(?:\|([^\]]+))?\]\])"
    r"|(\[\[COMPARISON:([^|\]]+)\|([^|\]]+)\|([^\]]+)\]\])"
    r"|(\{\{([\w-]+)(?::([\w-]+))?\}\})"
)


def parse_pretranslated(
    text: str,
    ctx: ResolutionContext,
    story: Story,
    options: Optional[TranslationOptions] = None,
    diagnostics: Optional[List[ParseDiagnostic]] = None,
) -> List[NormalizedSegment]:
    """Turn one pre-translated field into normalized segments."""
    options = options or TranslationOptions(language=ctx.language)
    segments: List[NormalizedSegment] = []

    for index, paragraph in enumerate(split_paragraphs(text)):
        if index > 0:
            segments.append(paragraph_break())
        segments.extend(_parse_paragraph(paragraph, index, ctx, story, options, diagnostics))

    return segments


def _parse_paragraph(
    paragraph: str,
    index: int,
    ctx: ResolutionContext,
    story: Story,
    options: TranslationOptions,
    diagnostics: Optional[List[ParseDiagnostic]],
) -> List[NormalizedSegment]:
    segments: List[NormalizedSegment] = []
    last_index = 0

    for match in TAGGED_PATTERN.finditer(paragraph):
        if match.start() > last_index:
            segments.append(_literal(paragraph[last_index:match.start()], index, last_index, diagnostics))

        if match.group(1):
            segments.append(_marker_segment(
                kind=match.group(2),
                original=match.group(4),
                value=match.group(5),
                explanation=match.group(6),
                options=options,
            ))
        elif match.group(7):
            segments.append(NormalizedSegment(
                text=match.group(9),
                tooltip=match.group(10),
                type=SegmentType.COMPARISON,
                style=SegmentStyle.ITALIC_COMPARISON,
                metadata={"original": match.group(8)},
            ))
        else:
            segments.append(segment_for_marker(match.group(12), match.group(13), ctx, story, options))

        last_index = match.end()

    if last_index < len(paragraph):
        segments.append(_literal(paragraph[last_index:], index, last_index, diagnostics))

    return segments


def _literal(
    text: str,
    paragraph: int,
    offset: int,
    diagnostics: Optional[List[ParseDiagnostic]],
) -> NormalizedSegment:
    check_literal(text, paragraph=paragraph, offset=offset, diagnostics=diagnostics, opening="[[", closing="]]")
    check_literal(text, paragraph=paragraph, offset=offset, diagnostics=diagnostics)
    return text_segment(text)


def _marker_segment(
    kind: str,
    original: str,
    value: str,
    explanation: Optional[str],
    options: TranslationOptions,
) -> NormalizedSegment:
    changed = original != value
    tooltip = explanation
    if tooltip is None and changed and options.contextualization_enabled:
        tooltip = f"Original: {original}"

    return NormalizedSegment(
        text=value,
        original=original if changed else None,
        tooltip=tooltip,
        type=SegmentType.coerce(kind),
        style=SegmentStyle.STRIKETHROUGH_MUTED if changed else None,
    )
