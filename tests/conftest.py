# tests/conftest.py
from typing import Dict, List, Optional, Tuple

import pytest

from contextualizer.adapters.persistence import context_cache
from contextualizer.core.domain.context import (
    CityRecord,
    ComparableEvent,
    CountryContext,
    FacilityPools,
    NamePools,
    PlaceHierarchy,
)
from contextualizer.core.domain.exceptions import CountryNotFoundError, StoryNotFoundError
from contextualizer.core.domain.story import PreTranslatedStory, Story
from contextualizer.core.translation.resolution import ResolutionContext
from contextualizer.shared.container import Container


# ---------------------------------------------------------------------------
# Country contexts
# ---------------------------------------------------------------------------


@pytest.fixture
def lidice() -> ComparableEvent:
    return ComparableEvent(
        id="lidice",
        name="Lidice",
        fullName="the Lidice massacre",
        casualties=340,
        category="massacre",
        year=1942,
    )


@pytest.fixture
def czech_context(lidice) -> CountryContext:
    """
    Small but complete Czech context.

    - Prague is the only large city (capital, regional female names).
    - Brno and Ostrava are medium; only Brno has a university.
    - No city has a prison or a morgue; prisons exist in the generic pool.
    """
    return CountryContext(
        code="CZ",
        name="Czech Republic",
        population=10_200_000,
        currency="CZK",
        currency_symbol="Kč",
        rial_to_local=0.00055,
        languages=["cs"],
        names=NamePools(
            male=["Jan", "Petr", "Tomáš"],
            female=["Eva", "Jana", "Lina"],
            neutral=["Alex"],
        ),
        places=PlaceHierarchy(
            cities=[
                CityRecord(
                    name="Prague",
                    size="large",
                    capital=True,
                    population=1_300_000,
                    landmarks={"protest": ["Wenceslas Square"], "monument": ["National Museum"]},
                    universities=["Charles University"],
                    hospitals=["General University Hospital"],
                    names=NamePools(female=["Libuše"]),
                ),
                CityRecord(
                    name="Brno",
                    size="medium",
                    population=380_000,
                    landmarks={"protest": ["Freedom Square"]},
                    universities=["Masaryk University"],
                    hospitals=["St. Anne's Hospital"],
                ),
                CityRecord(
                    name="Ostrava",
                    size="medium",
                    population=280_000,
                    hospitals=["Ostrava University Hospital"],
                ),
            ],
            generic=FacilityPools(
                universities=["the university"],
                prisons=["Pankrác Prison"],
            ),
        ),
        comparable_events=[
            lidice,
            ComparableEvent(
                id="heydrich-reprisals",
                name="Heydrich reprisals",
                casualties=5_000,
                category="war-casualties",
                year=1942,
            ),
        ],
    )


@pytest.fixture
def us_context() -> CountryContext:
    return CountryContext(
        code="US",
        name="United States",
        population=331_000_000,
        currency="USD",
        currency_symbol="$",
        rial_to_local=0.000024,
        names=NamePools(male=["James"], female=["Mary"], neutral=["Sam"]),
        places=PlaceHierarchy(
            cities=[CityRecord(name="Chicago", size="large", population=2_700_000)],
        ),
    )


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_story() -> Story:
    return Story.model_validate({
        "id": "story-001",
        "slug": "student-arrest",
        "title": "{{student}} arrested in {{city}}",
        "summary": "{{killed}} killed {{killed:comparable}}",
        "content": (
            "{{student}} walked to {{square}} on {{arrest-date}}.{{source:s1}}\n\n"
            "She was {{student:age}} years old. {{victim}} was taken to {{hospital}}."
        ),
        "markers": {
            "student": {"person": "Raha", "gender": "f", "age": 22},
            "victim": {"sameAs": "student"},
            "city": {"place": "Tehran", "city-large": True, "capital": True, "population": 9_000_000},
            "square": {"place": "Azadi Square", "landmark-protest": True, "within": "city"},
            "hospital": {"place": "Sina Hospital", "hospital": True, "within": "city"},
            "killed": {"casualties": 36_500, "killed": True, "comparable": "massacre"},
            "arrest-date": {"date": "2022-09-20"},
        },
        "sources": [{"id": "s1", "number": 1, "url": "https://example.org/report", "title": "Report"}],
        "images": [{"id": "i1", "src": "/img/square.jpg", "alt": "The square"}],
        "date": "2022-09-20",
        "tags": ["protest"],
        "severity": "high",
        "verified": True,
    })


@pytest.fixture
def make_ctx(czech_context):
    """Factory for a ResolutionContext over a raw marker mapping."""
    def _make(markers: Dict, country: Optional[CountryContext] = None, language: str = "en", story_id: str = "story-001"):
        story = Story.model_validate({"id": story_id, "slug": story_id, "markers": markers})
        return ResolutionContext.for_story(story, country or czech_context, language)
    return _make


# ---------------------------------------------------------------------------
# In-memory repositories & container
# ---------------------------------------------------------------------------


class InMemoryStoryRepository:
    def __init__(self, stories: List[Story], variants: Optional[Dict[Tuple[str, str, str], PreTranslatedStory]] = None):
        self.stories = {s.slug: s for s in stories}
        self.variants = variants or {}

    def get_story(self, slug: str) -> Story:
        if slug not in self.stories:
            raise StoryNotFoundError(slug)
        return self.stories[slug]

    def get_pretranslated(self, slug: str, language: str, country_code: str) -> Optional[PreTranslatedStory]:
        return self.variants.get((slug, language, country_code.upper()))


class InMemoryContextRepository:
    def __init__(self, countries: List[CountryContext]):
        self.countries = {c.code: c for c in countries}

    def get_country(self, country_code: str) -> CountryContext:
        code = country_code.upper()
        if code not in self.countries:
            raise CountryNotFoundError(code)
        return self.countries[code]

    def list_countries(self) -> List[str]:
        return sorted(self.countries)


@pytest.fixture
def story_repo(sample_story):
    return InMemoryStoryRepository([sample_story])


@pytest.fixture
def context_repo(czech_context, us_context):
    return InMemoryContextRepository([czech_context, us_context])


@pytest.fixture(scope="function")
def container(story_repo, context_repo):
    """
    Sets up the Dependency Injection Container for testing.
    It overrides the filesystem repositories with in-memory fakes.
    """
    container = Container()
    container.story_repository.override(story_repo)
    container.context_repository.override(context_repo)

    yield container

    container.story_repository.reset_override()
    container.context_repository.reset_override()


@pytest.fixture(autouse=True)
def _fresh_context_cache():
    """The context cache is process-wide; keep tests independent."""
    context_cache.clear_cache()
    yield
    context_cache.clear_cache()
