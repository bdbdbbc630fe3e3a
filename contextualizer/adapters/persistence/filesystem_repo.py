# contextualizer/adapters/persistence/filesystem_repo.py
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from contextualizer.adapters.persistence import context_cache
from contextualizer.core.domain.context import CountryContext
from contextualizer.core.domain.exceptions import InvalidStoryDataError, StoryNotFoundError
from contextualizer.core.domain.story import PreTranslatedStory, Story
from contextualizer.core.ports.context_repository import IContextRepository
from contextualizer.core.ports.story_repository import IStoryRepository

logger = structlog.get_logger()

STORY_FILE = "story.json"


class FileSystemContextRepository(IContextRepository):
    """
    Context tables read from <base_path>/*.json, cached for the process lifetime.
    """

    def __init__(self, base_path: str, fallback_country: str = "US"):
        self.base_path = Path(base_path)
        self.fallback_country = fallback_country

    def get_country(self, country_code: str) -> CountryContext:
        return context_cache.get_or_build_country(self.base_path, country_code, self.fallback_country)

    def list_countries(self) -> List[str]:
        return sorted(context_cache.get_or_load_tables(self.base_path).countries)

    def warmup(self) -> None:
        """Load the tables eagerly (batch jobs call this before forking workers)."""
        context_cache.get_or_load_tables(self.base_path)


class FileSystemStoryRepository(IStoryRepository):
    """
    Stories stored one folder per slug:

        <base_path>/<slug>/story.json           authored story
        <base_path>/<slug>/story.cs-cz.json     pre-translated variant (language-country)
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)

    def _story_dir(self, slug: str) -> Path:
        # Structure: .../stories/<slug>/story.json
        return self.base_path / slug

    def _load_file(self, slug: str, path: Path) -> Dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("story_read_failed", slug=slug, path=str(path), error=str(e))
            raise InvalidStoryDataError(slug, f"{path.name}: invalid JSON") from e
        if not isinstance(data, dict):
            raise InvalidStoryDataError(slug, f"{path.name}: root must be an object")
        return data

    # --- Interface Implementation ---

    def get_story(self, slug: str) -> Story:
        path = self._story_dir(slug) / STORY_FILE
        if not path.is_file():
            raise StoryNotFoundError(slug)

        data = self._load_file(slug, path)
        data.setdefault("slug", slug)
        data.setdefault("id", slug)
        try:
            return Story.model_validate(data)
        except ValidationError as e:
            raise InvalidStoryDataError(slug, str(e)) from e

    def get_pretranslated(self, slug: str, language: str, country_code: str) -> Optional[PreTranslatedStory]:
        path = self._story_dir(slug) / f"story.{language.lower()}-{country_code.lower()}.json"
        if not path.is_file():
            return None

        try:
            return PreTranslatedStory.model_validate(self._load_file(slug, path))
        except ValidationError as e:
            raise InvalidStoryDataError(slug, f"{path.name}: {e}") from e

    def list_stories(self) -> List[str]:
        if not self.base_path.is_dir():
            return []
        return sorted(p.name for p in self.base_path.iterdir() if (p / STORY_FILE).is_file())
