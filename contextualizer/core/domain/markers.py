# contextualizer/core/domain/markers.py
"""
core/domain/markers.py
======================

Closed set of marker variants that a story template may reference.

Authoring data describes markers as loose mappings whose variant is implied
by which distinguishing field is present (`person`, `place`, `casualties`,
...); only sources and images carry an explicit `type` discriminant. This
module turns such a mapping into exactly one typed model, once, at the
loading boundary:

    raw = {"place": "Azadi Square", "landmark-protest": True, "within": "city"}
    marker = parse_marker(raw)
    assert marker.kind == "place"
    assert marker.facility_kind is FacilityKind.LANDMARK_PROTEST

Boolean authoring flags (`city-small`, `killed`, `days`, ...) are folded into
a single enum field per concern. The engine dispatches on `marker.kind` and
never probes raw fields again.

Discrimination is total: anything unrecognised becomes an `UnknownMarker`,
which the engine renders as a placeholder.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


Gender = Literal["m", "f", "x"]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SizeClass(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class FacilityKind(str, Enum):
    """
    Facility a place marker stands for. Values double as the authoring flag names.

    `LANDMARK` is the catch-all and is listed last so that a specific landmark
    flag wins when an author sets both.
    """
    LANDMARK_PROTEST = "landmark-protest"
    LANDMARK_MONUMENT = "landmark-monument"
    UNIVERSITY = "university"
    HOSPITAL = "hospital"
    MORGUE = "morgue"
    PRISON = "prison"
    POLICE_STATION = "police-station"
    GOVERNMENT_FACILITY = "government-facility"
    LANDMARK = "landmark"


class CasualtyKind(str, Enum):
    KILLED = "killed"
    WOUNDED = "wounded"
    MISSING = "missing"
    DETAINED = "detained"
    EXECUTED = "executed"


class UnitHint(str, Enum):
    CITIES = "cities"
    DAYS = "days"
    YEARS = "years"
    MONTHS = "months"
    HOURS = "hours"


class ComparisonCategory(str, Enum):
    MASSACRE = "massacre"
    TERRORIST_ATTACK = "terrorist-attack"
    NATURAL_DISASTER = "natural-disaster"
    WAR_CASUALTIES = "war-casualties"
    ANY = "any"


def _first_flag(data: Mapping[str, Any], enum_cls: Type[Enum]) -> Optional[str]:
    for member in enum_cls:
        if data.get(member.value) is True:
            return member.value
    return None


# ---------------------------------------------------------------------------
# Marker variants
# ---------------------------------------------------------------------------


class _MarkerBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class PersonMarker(_MarkerBase):
    kind: Literal["person"] = "person"
    person: str
    gender: Gender = "x"
    age: Optional[int] = None
    # Key of a place marker whose city supplies regional names
    regional_from: Optional[str] = Field(default=None, alias="from")


class PlaceMarker(_MarkerBase):
    kind: Literal["place"] = "place"
    place: str
    size_class: Optional[SizeClass] = None
    capital: bool = False
    facility_kind: Optional[FacilityKind] = None
    # Key of the parent place marker (the city containing this facility)
    within: Optional[str] = None
    region: Optional[str] = None
    # Authored (source country) population, used for city-scoped casualties
    population: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_flags(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if data.get("size_class") is None:
            for size in SizeClass:
                if data.get(f"city-{size.value}") is True:
                    data["size_class"] = size.value
                    break
        if data.get("facility_kind") is None:
            data["facility_kind"] = _first_flag(data, FacilityKind)
        return data


class NumberMarker(_MarkerBase):
    kind: Literal["number"] = "number"
    number: Union[int, float]
    unit_hint: Optional[UnitHint] = None
    scaled: bool = False
    # Dampening applied on top of the population ratio
    scale_factor: float = Field(default=1.0, alias="scaleFactor")
    variance: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_flags(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if data.get("unit_hint") is None:
            data["unit_hint"] = _first_flag(data, UnitHint)
        # Older stories spell these 'scale' / 'scale-factor'
        if "scaled" not in data and "scale" in data:
            data["scaled"] = data["scale"]
        if "scaleFactor" not in data and "scale_factor" not in data and "scale-factor" in data:
            data["scaleFactor"] = data["scale-factor"]
        return data


class CasualtiesMarker(_MarkerBase):
    kind: Literal["casualties"] = "casualties"
    casualties: int
    casualty_kind: Optional[CasualtyKind] = None
    scope: Literal["country", "city"] = "country"
    scope_city: Optional[str] = Field(default=None, alias="scopeCity")
    comparable: Optional[ComparisonCategory] = None
    compared_to: Optional[str] = Field(default=None, alias="comparedTo")
    timeframe: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_flags(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if data.get("casualty_kind") is None:
            data["casualty_kind"] = _first_flag(data, CasualtyKind)
        return data


class DateMarker(_MarkerBase):
    kind: Literal["date"] = "date"
    date: str
    format: Optional[str] = None


class TimeMarker(_MarkerBase):
    kind: Literal["time"] = "time"
    time: str
    format: Optional[str] = None


class CurrencyMarker(_MarkerBase):
    kind: Literal["currency"] = "currency"
    # Amount in rial
    currency: Union[int, float]


class AliasMarker(_MarkerBase):
    kind: Literal["alias"] = "alias"
    same_as: str = Field(alias="sameAs")


class SourceMarker(_MarkerBase):
    kind: Literal["source"] = "source"
    text: str = ""
    url: Optional[str] = None
    title: Optional[str] = None
    number: Optional[int] = None


class ImageMarker(_MarkerBase):
    kind: Literal["image"] = "image"
    src: str
    alt: str = ""
    caption: Optional[str] = None
    content_warning: Optional[str] = Field(default=None, alias="contentWarning")
    credit: Optional[str] = None
    credit_url: Optional[str] = Field(default=None, alias="creditUrl")


class UnknownMarker(_MarkerBase):
    kind: Literal["unknown"] = "unknown"
    raw: Dict[str, Any] = Field(default_factory=dict)


Marker = Union[
    PersonMarker,
    PlaceMarker,
    NumberMarker,
    CasualtiesMarker,
    DateMarker,
    TimeMarker,
    CurrencyMarker,
    AliasMarker,
    SourceMarker,
    ImageMarker,
    UnknownMarker,
]


# ---------------------------------------------------------------------------
# Discrimination
# ---------------------------------------------------------------------------

# Distinguishing field -> kind, checked in this order. First hit wins.
_FIELD_PRECEDENCE: Tuple[Tuple[str, str], ...] = (
    ("person", "person"),
    ("place", "place"),
    ("number", "number"),
    ("casualties", "casualties"),
    ("date", "date"),
    ("time", "time"),
    ("currency", "currency"),
    ("sameAs", "alias"),
    ("same_as", "alias"),
)

# Kinds that still use an explicit discriminant; it wins over any field (a
# citation carries its own `number`)
_EXPLICIT_TYPES = ("source", "image")

MARKER_MODELS: Dict[str, Type[BaseModel]] = {
    "person": PersonMarker,
    "place": PlaceMarker,
    "number": NumberMarker,
    "casualties": CasualtiesMarker,
    "date": DateMarker,
    "time": TimeMarker,
    "currency": CurrencyMarker,
    "alias": AliasMarker,
    "source": SourceMarker,
    "image": ImageMarker,
    "unknown": UnknownMarker,
}

_MARKER_CLASSES = tuple(MARKER_MODELS.values())


def discriminate(raw: Mapping[str, Any]) -> str:
    """
    Infer the marker kind of a raw authoring mapping.

    Returns one of the MARKER_MODELS keys; "unknown" when nothing matches.
    """
    explicit = raw.get("type")
    if explicit in _EXPLICIT_TYPES:
        return explicit
    for field_name, kind in _FIELD_PRECEDENCE:
        if raw.get(field_name) is not None:
            return kind
    return "unknown"


def parse_marker(raw: Any) -> Marker:
    """
    Validate a raw mapping into exactly one marker model.

    Already-built marker models are returned unchanged. Raises
    pydantic.ValidationError when the distinguishing field is present but the
    rest of the mapping is malformed.
    """
    if isinstance(raw, _MARKER_CLASSES):
        return raw
    if not isinstance(raw, Mapping):
        return UnknownMarker(raw={"value": raw})

    kind = discriminate(raw)
    if kind == "unknown":
        return UnknownMarker(raw=dict(raw))
    return MARKER_MODELS[kind].model_validate(raw)


def parse_markers(raw_map: Mapping[str, Any]) -> Dict[str, Marker]:
    return {str(key): parse_marker(value) for key, value in raw_map.items()}


def authored_value(marker: Marker) -> str:
    """The value as written for the source country, used for 'original' display."""
    if isinstance(marker, PersonMarker):
        return marker.person
    if isinstance(marker, PlaceMarker):
        return marker.place
    if isinstance(marker, NumberMarker):
        return _plain_number(marker.number)
    if isinstance(marker, CasualtiesMarker):
        return str(marker.casualties)
    if isinstance(marker, DateMarker):
        return marker.date
    if isinstance(marker, TimeMarker):
        return marker.time
    if isinstance(marker, CurrencyMarker):
        return f"{marker.currency:,.0f} Rial"
    if isinstance(marker, SourceMarker):
        return marker.text
    return ""


def _plain_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "Gender",
    "SizeClass",
    "FacilityKind",
    "CasualtyKind",
    "UnitHint",
    "ComparisonCategory",
    "PersonMarker",
    "PlaceMarker",
    "NumberMarker",
    "CasualtiesMarker",
    "DateMarker",
    "TimeMarker",
    "CurrencyMarker",
    "AliasMarker",
    "SourceMarker",
    "ImageMarker",
    "UnknownMarker",
    "Marker",
    "MARKER_MODELS",
    "discriminate",
    "parse_marker",
    "parse_markers",
    "authored_value",
]
