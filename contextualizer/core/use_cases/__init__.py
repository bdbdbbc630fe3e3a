# contextualizer/core/use_cases/__init__.py
from .translate_story import TranslateStory

__all__ = ["TranslateStory"]
