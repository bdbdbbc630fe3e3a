# tests/adapters/test_filesystem_repo.py
import json
from pathlib import Path

import pytest

from contextualizer.adapters.persistence import context_cache
from contextualizer.adapters.persistence.context_loader import load_context_tables
from contextualizer.adapters.persistence.filesystem_repo import (
    FileSystemContextRepository,
    FileSystemStoryRepository,
)
from contextualizer.core.domain.exceptions import (
    CountryNotFoundError,
    InvalidContextDataError,
    InvalidStoryDataError,
    StoryNotFoundError,
)
from contextualizer.core.domain.markers import PersonMarker


def _write(path: Path, payload) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


@pytest.fixture
def contexts_dir(tmp_path):
    """Minimal context tables: CZ with its own data, DE relying on US fallbacks."""
    base = tmp_path / "contexts"
    _write(base / "countries.json", {"countries": [
        {"code": "CZ", "name": "Czech Republic", "population": 10_200_000,
         "currency": "CZK", "currency-symbol": "Kč", "rial-to-local": 0.00055},
        {"code": "DE", "name": "Germany", "population": 83_000_000},
        {"code": "us", "name": "United States", "population": 331_000_000},
    ]})
    _write(base / "names.json", {
        "CZ": {"male": ["Jan"], "female": ["Eva"], "neutral": ["Alex"]},
        "US": {"male": ["James"], "female": ["Mary"], "neutral": ["Sam"]},
    })
    _write(base / "places.json", {
        "CZ": {"cities": [{"name": "Prague", "size": "large", "capital": True,
                           "landmarks": {"protest": ["Wenceslas Square"]},
                           "police-stations": ["Bartolomějská"]}]},
        "US": {"cities": [{"name": "Chicago", "size": "large"}], "generic": {"universities": ["State University"]}},
    })
    _write(base / "comparable-events.json", {
        "CZ": [{"id": "lidice", "name": "Lidice", "fullName": "the Lidice massacre",
                "casualties": 340, "category": "massacre", "year": 1942}],
    })
    _write(base / "country-languages.json", {"countries": {"CZ": {"languages": ["cs"]}}})
    return base


@pytest.fixture
def stories_dir(tmp_path):
    base = tmp_path / "stories"
    _write(base / "student-arrest" / "story.json", {
        "id": "story-001",
        "title": "{{student}}",
        "markers": {"student": {"person": "Raha", "gender": "f"}},
        "date": "2022-09-20",
    })
    _write(base / "student-arrest" / "story.cs-cz.json", {"title": "[[MARKER:person:student:Raha|Eva]]"})
    return base


class TestContextLoader:
    def test_tables_loaded(self, contexts_dir):
        tables = load_context_tables(contexts_dir)
        assert sorted(tables.countries) == ["CZ", "DE", "US"]
        assert tables.languages == {"CZ": ["cs"]}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(InvalidContextDataError):
            load_context_tables(tmp_path)

    def test_invalid_json(self, contexts_dir):
        (contexts_dir / "names.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidContextDataError) as excinfo:
            load_context_tables(contexts_dir)
        assert "names.json" in str(excinfo.value)

    def test_invalid_record(self, contexts_dir):
        _write(contexts_dir / "comparable-events.json", {"CZ": [{"id": "x"}]})
        with pytest.raises(InvalidContextDataError):
            load_context_tables(contexts_dir)

    def test_event_without_casualties_rejected(self, contexts_dir):
        _write(contexts_dir / "comparable-events.json", {"CZ": [
            {"id": "x", "name": "X", "casualties": 0, "category": "massacre"},
        ]})
        with pytest.raises(InvalidContextDataError):
            load_context_tables(contexts_dir)

    def test_events_file_optional(self, contexts_dir):
        (contexts_dir / "comparable-events.json").unlink()
        assert load_context_tables(contexts_dir).events == {}


class TestFileSystemContextRepository:
    def test_country_assembled(self, contexts_dir):
        repo = FileSystemContextRepository(str(contexts_dir))
        country = repo.get_country("cz")
        assert country.code == "CZ"
        assert country.currency_symbol == "Kč"
        assert country.languages == ["cs"]
        assert country.places.cities[0].police_stations == ["Bartolomějská"]
        assert country.comparable_events[0].display_name == "the Lidice massacre"

    def test_fallback_tables(self, contexts_dir):
        """
        Scenario: Germany has no names or places of its own.
        Expected: US pools stand in; comparable events do not fall back.
        """
        country = FileSystemContextRepository(str(contexts_dir)).get_country("DE")
        assert country.names.male == ["James"]
        assert country.places.cities[0].name == "Chicago"
        assert country.comparable_events == []

    def test_unknown_country(self, contexts_dir):
        with pytest.raises(CountryNotFoundError):
            FileSystemContextRepository(str(contexts_dir)).get_country("XX")

    def test_cached_per_process(self, contexts_dir):
        first = FileSystemContextRepository(str(contexts_dir)).get_country("CZ")
        second = FileSystemContextRepository(str(contexts_dir)).get_country("CZ")
        assert first is second
        assert context_cache.cached_directories() == [str(contexts_dir.resolve())]

    def test_list_countries(self, contexts_dir):
        assert FileSystemContextRepository(str(contexts_dir)).list_countries() == ["CZ", "DE", "US"]

    def test_set_tables_replaces_cached_countries(self, contexts_dir):
        repo = FileSystemContextRepository(str(contexts_dir))
        before = repo.get_country("CZ")
        tables = load_context_tables(contexts_dir)
        context_cache.set_tables(contexts_dir, tables)
        after = repo.get_country("CZ")
        assert after is not before
        assert after == before


class TestFileSystemStoryRepository:
    def test_get_story(self, stories_dir):
        story = FileSystemStoryRepository(str(stories_dir)).get_story("student-arrest")
        assert story.id == "story-001"
        assert story.slug == "student-arrest"
        assert isinstance(story.markers["student"], PersonMarker)

    def test_story_not_found(self, stories_dir):
        with pytest.raises(StoryNotFoundError):
            FileSystemStoryRepository(str(stories_dir)).get_story("missing")

    def test_invalid_story(self, stories_dir):
        (stories_dir / "student-arrest" / "story.json").write_text("[]", encoding="utf-8")
        with pytest.raises(InvalidStoryDataError):
            FileSystemStoryRepository(str(stories_dir)).get_story("student-arrest")

    def test_pretranslated_variant(self, stories_dir):
        repo = FileSystemStoryRepository(str(stories_dir))
        variant = repo.get_pretranslated("student-arrest", "cs", "CZ")
        assert variant.title.startswith("[[MARKER:")
        assert repo.get_pretranslated("student-arrest", "de", "DE") is None

    def test_list_stories(self, stories_dir):
        assert FileSystemStoryRepository(str(stories_dir)).list_stories() == ["student-arrest"]
