# contextualizer/core/translation/parser.py
"""
core/translation/parser.py
==========================

Template parser for story text.

Templates are plain prose with single-level marker references:

    {{student}} walked to {{square}} on {{arrest-date}}.
    She was {{student:age}} years old.

Text is split on blank lines into paragraphs; each paragraph is tokenized
into literal and marker tokens, in order, and paragraphs are separated by an
explicit ParagraphBreakToken.

Malformed syntax (`{{student`, `{{ bad key }}`, stray `}}`) is never an
error: it stays in the literal text, and a ParseDiagnostic is recorded and
logged so that authoring mistakes stay discoverable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

import structlog

logger = structlog.get_logger()

MARKER_PATTERN = re.compile(r"\{\{([\w-]+)(?::([\w-]+))?\}\}")
PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")

_STRAY_OPEN = "{{"
_STRAY_CLOSE = "}}"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LiteralToken:
    text: str


@dataclass(frozen=True, slots=True)
class MarkerToken:
    key: str
    suffix: Optional[str] = None
    raw: str = ""


@dataclass(frozen=True, slots=True)
class ParagraphBreakToken:
    pass


Token = Union[LiteralToken, MarkerToken, ParagraphBreakToken]


@dataclass(frozen=True, slots=True)
class ParseDiagnostic:
    """Malformed marker syntax left in the output as literal text."""

    paragraph: int
    offset: int
    fragment: str
    message: str


@dataclass(slots=True)
class TemplateParse:
    tokens: List[Token] = field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def markers(self) -> List[MarkerToken]:
        return [t for t in self.tokens if isinstance(t, MarkerToken)]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def split_paragraphs(text: str) -> List[str]:
    """Split on blank lines; whitespace-only paragraphs are dropped."""
    if not text:
        return []
    return [p.strip("\n") for p in PARAGRAPH_SPLIT.split(text) if p.strip()]


def check_literal(
    text: str,
    *,
    paragraph: int,
    offset: int,
    diagnostics: Optional[List[ParseDiagnostic]],
    opening: str = _STRAY_OPEN,
    closing: str = _STRAY_CLOSE,
) -> None:
    """
    Record a diagnostic when a literal chunk still carries marker delimiters.

    Shared with the pre-translated re-parser, which passes its own delimiters.
    """
    for delimiter in (opening, closing):
        position = text.find(delimiter)
        if position < 0:
            continue
        fragment = text[max(0, position - 10):position + 30]
        diagnostic = ParseDiagnostic(
            paragraph=paragraph,
            offset=offset + position,
            fragment=fragment,
            message=f"unmatched '{delimiter}' left as literal text",
        )
        logger.warning(
            "template_syntax_malformed",
            paragraph=paragraph,
            offset=diagnostic.offset,
            fragment=fragment,
        )
        if diagnostics is not None:
            diagnostics.append(diagnostic)
        return


def tokenize(
    paragraph: str,
    *,
    paragraph_index: int = 0,
    diagnostics: Optional[List[ParseDiagnostic]] = None,
) -> List[Token]:
    """Split one paragraph into literal and marker tokens, preserving order."""
    tokens: List[Token] = []
    last_index = 0

    for match in MARKER_PATTERN.finditer(paragraph):
        if match.start() > last_index:
            literal = paragraph[last_index:match.start()]
            check_literal(literal, paragraph=paragraph_index, offset=last_index, diagnostics=diagnostics)
            tokens.append(LiteralToken(literal))
        tokens.append(MarkerToken(key=match.group(1), suffix=match.group(2), raw=match.group(0)))
        last_index = match.end()

    if last_index < len(paragraph):
        literal = paragraph[last_index:]
        check_literal(literal, paragraph=paragraph_index, offset=last_index, diagnostics=diagnostics)
        tokens.append(LiteralToken(literal))

    return tokens


def parse_template(text: str) -> TemplateParse:
    """
    Parse a full text field into paragraph-scoped tokens.

    A ParagraphBreakToken separates consecutive paragraphs; none is emitted
    before the first or after the last.
    """
    result = TemplateParse()
    for index, paragraph in enumerate(split_paragraphs(text)):
        if index > 0:
            result.tokens.append(ParagraphBreakToken())
        result.tokens.extend(
            tokenize(paragraph, paragraph_index=index, diagnostics=result.diagnostics)
        )
    return result


def referenced_keys(text: str) -> List[str]:
    """
    Marker keys referenced by a template, in first-seen order.

    The reserved `source` / `image` namespaces are excluded: they point into
    the story's sources/images lists, not its marker map.
    """
    seen: List[str] = []
    for match in MARKER_PATTERN.finditer(text or ""):
        key = match.group(1)
        if key in ("source", "image") or key in seen:
            continue
        seen.append(key)
    return seen


__all__ = [
    "MARKER_PATTERN",
    "LiteralToken",
    "MarkerToken",
    "ParagraphBreakToken",
    "Token",
    "ParseDiagnostic",
    "TemplateParse",
    "split_paragraphs",
    "check_literal",
    "tokenize",
    "parse_template",
    "referenced_keys",
]
