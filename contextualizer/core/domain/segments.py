# contextualizer/core/domain/segments.py
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---

class SegmentType(str, Enum):
    """What a rendered segment stands for."""
    TEXT = "text"
    PERSON = "person"
    PLACE = "place"
    NUMBER = "number"
    CASUALTIES = "casualties"
    DATE = "date"
    SOURCE = "source"
    IMAGE = "image"
    COMPARISON = "comparison"
    PARAGRAPH_BREAK = "paragraph-break"

    @classmethod
    def coerce(cls, value: str) -> "SegmentType":
        """Map a free-form type tag (e.g. from pre-translated text) onto a segment type."""
        aliases = {"time": cls.DATE, "currency": cls.NUMBER}
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT

class SegmentStyle(str, Enum):
    """Presentation hint; renderers decide what it looks like."""
    STRIKETHROUGH_MUTED = "strikethrough-muted"  # substituted value, original shown struck
    BOLD_PRIMARY = "bold-primary"                # citation markers
    ITALIC_COMPARISON = "italic-comparison"      # comparison phrases

# --- Entities ---

class TranslationResult(BaseModel):
    """
    Resolved value of one marker for one (story, country, language).

    `original` is None when the value should not be styled as substituted.
    `amount`, `population` and `city` are engine-internal: they let dependent
    markers (aliases, city-scoped casualties, comparisons) reuse the numbers
    behind the display text.
    """
    model_config = ConfigDict(frozen=True)

    value: str
    original: Optional[str] = None
    comparison: Optional[str] = None
    comparison_explanation: Optional[str] = None
    explanation: Optional[str] = None

    amount: Optional[int] = None
    population: Optional[int] = None
    city: Optional[str] = None

class NormalizedSegment(BaseModel):
    """
    Renderer-agnostic unit of output. A text field becomes an ordered list of these.
    """
    text: str
    original: Optional[str] = None
    tooltip: Optional[str] = None
    type: SegmentType = SegmentType.TEXT
    style: Optional[SegmentStyle] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form without empty optional fields."""
        return self.model_dump(mode="json", exclude_none=True)

class TranslatedStoryOutput(BaseModel):
    """
    The translated story handed to presentation layers.
    """
    id: str
    slug: str
    title: List[NormalizedSegment] = Field(default_factory=list)
    summary: List[NormalizedSegment] = Field(default_factory=list)
    content: List[NormalizedSegment] = Field(default_factory=list)

    # country, language, contextualized, translation_source
    metadata: Dict[str, Any] = Field(default_factory=dict)

    # Preserved story metadata
    date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    hashtags: Optional[str] = None
    severity: Optional[str] = None
    verified: bool = False
    source: Optional[str] = None
    content_warning: Optional[str] = None
