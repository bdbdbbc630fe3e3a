# contextualizer/core/domain/context.py
"""
Static per-country context tables.

One CountryContext is assembled per country when the tables are loaded and is
shared read-only by every translation for that country. All models are
frozen; nothing in the engine mutates them.

Place data is hierarchical:

    places:
      cities:
        - name: Prague
          size: large
          capital: true
          population: 1300000
          landmarks: {protest: [Wenceslas Square], monument: [...]}
          universities: [Charles University]
          hospitals: [...]
      generic:
        landmarks: {protest: [the main square]}
        universities: [the university]
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from contextualizer.core.domain.markers import FacilityKind, SizeClass

# Population of the country stories are authored for (Iran); the scaling baseline
DEFAULT_SOURCE_POPULATION = 85_000_000


class NamePools(BaseModel):
    model_config = ConfigDict(frozen=True)

    male: List[str] = Field(default_factory=list)
    female: List[str] = Field(default_factory=list)
    neutral: List[str] = Field(default_factory=list)

    def for_gender(self, gender: str) -> List[str]:
        """Pool for a marker gender (m/f/x); empty pools fall back to neutral."""
        pool = {"m": self.male, "f": self.female}.get(gender, self.neutral)
        return pool or self.neutral

    def is_empty(self) -> bool:
        return not (self.male or self.female or self.neutral)


class FacilityPools(BaseModel):
    """Facility name lists, keyed the way the data tables spell them."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    landmarks: Dict[str, List[str]] = Field(default_factory=dict)
    universities: List[str] = Field(default_factory=list)
    hospitals: List[str] = Field(default_factory=list)
    morgues: List[str] = Field(default_factory=list)
    prisons: List[str] = Field(default_factory=list)
    police_stations: List[str] = Field(default_factory=list, alias="police-stations")
    government_facilities: List[str] = Field(default_factory=list, alias="government-facilities")

    def facilities(self, kind: FacilityKind) -> List[str]:
        """
        Names for one facility kind. `LANDMARK` is the union of every landmark
        sub-list, in table order, without duplicates.
        """
        if kind is FacilityKind.LANDMARK:
            merged: List[str] = []
            for names in self.landmarks.values():
                for name in names:
                    if name not in merged:
                        merged.append(name)
            return merged
        if kind is FacilityKind.LANDMARK_PROTEST:
            return list(self.landmarks.get("protest", []))
        if kind is FacilityKind.LANDMARK_MONUMENT:
            return list(self.landmarks.get("monument", []))
        return list({
            FacilityKind.UNIVERSITY: self.universities,
            FacilityKind.HOSPITAL: self.hospitals,
            FacilityKind.MORGUE: self.morgues,
            FacilityKind.PRISON: self.prisons,
            FacilityKind.POLICE_STATION: self.police_stations,
            FacilityKind.GOVERNMENT_FACILITY: self.government_facilities,
        }[kind])


class CityRecord(FacilityPools):
    name: str
    size: Optional[SizeClass] = None
    capital: bool = False
    population: Optional[int] = None
    region: Optional[str] = None
    # Regional name pools; empty means "use the country pools"
    names: NamePools = Field(default_factory=NamePools)


class PlaceHierarchy(BaseModel):
    model_config = ConfigDict(frozen=True)

    cities: List[CityRecord] = Field(default_factory=list)
    generic: FacilityPools = Field(default_factory=FacilityPools)

    def find_city(self, name: str) -> Optional[CityRecord]:
        return next((c for c in self.cities if c.name == name), None)

    def cities_matching(self, size: Optional[SizeClass], capital: bool) -> List[CityRecord]:
        """Cities of a size class; a capital flag narrows to capitals when any exist."""
        matches = [c for c in self.cities if size is None or c.size == size]
        if capital:
            capitals = [c for c in matches if c.capital]
            if capitals:
                return capitals
        return matches


class ComparableEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    full_name: Optional[str] = Field(default=None, alias="fullName")
    casualties: int = Field(gt=0)
    category: str
    year: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.name


class CountryContext(BaseModel):
    """Everything the engine knows about one target country."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str
    name: str = ""
    population: int
    currency: str = ""
    currency_symbol: str = Field(default="$", alias="currency-symbol")
    rial_to_local: float = Field(default=0.000024, alias="rial-to-local")
    timezones: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    names: NamePools = Field(default_factory=NamePools)
    places: PlaceHierarchy = Field(default_factory=PlaceHierarchy)
    comparable_events: List[ComparableEvent] = Field(default_factory=list)
