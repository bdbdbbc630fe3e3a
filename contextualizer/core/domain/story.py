# contextualizer/core/domain/story.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from contextualizer.core.domain.markers import Marker, parse_markers


class SourceReference(BaseModel):
    """A citation rendered for `{{source:<id>}}`."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    number: int
    url: Optional[str] = None
    title: Optional[str] = None


class ImageReference(BaseModel):
    """An embedded image rendered for `{{image:<id>}}`."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    src: str
    alt: str = ""
    caption: Optional[str] = None
    content_warning: Optional[str] = Field(default=None, alias="contentWarning")
    credit: Optional[str] = None
    credit_url: Optional[str] = Field(default=None, alias="creditUrl")


class Story(BaseModel):
    """
    An authored story: three template fields plus the markers they reference.

    Templates use `{{key}}` / `{{key:suffix}}` placeholders. The marker map is
    validated into typed markers on construction, so a Story instance never
    holds raw authoring dicts.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    slug: str
    title: str = ""
    summary: str = ""
    content: str = ""
    markers: Dict[str, Marker] = Field(default_factory=dict)
    sources: List[SourceReference] = Field(default_factory=list)
    images: List[ImageReference] = Field(default_factory=list)

    # Passthrough metadata
    date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    hashtags: Optional[str] = None
    severity: Optional[str] = None
    verified: bool = False
    source: Optional[str] = None
    content_warning: Optional[str] = Field(default=None, alias="content-warning")
    image: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("markers", mode="before")
    @classmethod
    def _parse_markers(cls, value: Any) -> Any:
        if value is None:
            return {}
        return parse_markers(value)

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_text(cls, value: Any) -> Any:
        # Authoring tools emit bare dates; keep them as ISO text
        if value is not None and not isinstance(value, str):
            return str(value)
        return value

    def find_source(self, source_id: str) -> Optional[SourceReference]:
        return next((s for s in self.sources if s.id == source_id), None)

    def find_image(self, image_id: str) -> Optional[ImageReference]:
        return next((i for i in self.images if i.id == image_id), None)


class PreTranslatedStory(BaseModel):
    """
    A story variant whose prose was already translated and whose markers were
    substituted into the `[[MARKER:...]]` / `[[COMPARISON:...]]` tagged format.
    Markers, sources and images still come from the original Story.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = ""
    summary: str = ""
    content: str = ""
