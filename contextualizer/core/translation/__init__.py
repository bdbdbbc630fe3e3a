# contextualizer/core/translation/__init__.py
"""
The contextualization engine.

Pure, synchronous functions over immutable inputs: story templates, typed
markers and a CountryContext go in, ordered NormalizedSegments come out. The
only mutable state is the per-request ResolutionContext.
"""

from .normalizer import TranslationOptions, normalize_text, segment_for_marker
from .parser import parse_template, referenced_keys
from .pretranslated import parse_pretranslated
from .resolution import ResolutionContext
from .selector import SELECTOR_VERSION, make_seed, seeded_random, select

__all__ = [
    "SELECTOR_VERSION",
    "ResolutionContext",
    "TranslationOptions",
    "make_seed",
    "normalize_text",
    "parse_pretranslated",
    "parse_template",
    "referenced_keys",
    "segment_for_marker",
    "seeded_random",
    "select",
]
