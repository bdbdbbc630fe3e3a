# contextualizer/core/ports/story_repository.py
from typing import Optional, Protocol

from contextualizer.core.domain.story import PreTranslatedStory, Story


class IStoryRepository(Protocol):
    """
    Port for authored stories and their pre-translated variants.
    """

    def get_story(self, slug: str) -> Story:
        """
        Retrieves a story by slug.

        Raises:
            StoryNotFoundError: if no such story exists.
        """
        ...

    def get_pretranslated(self, slug: str, language: str, country_code: str) -> Optional[PreTranslatedStory]:
        """
        Retrieves the pre-translated variant for a (language, country) pair.

        Returns:
            The variant if one was produced, None otherwise.
        """
        ...
