# contextualizer/shared/container.py
from dependency_injector import containers, providers

from contextualizer.shared.config import settings
from contextualizer.adapters.persistence.filesystem_repo import (
    FileSystemContextRepository,
    FileSystemStoryRepository,
)
from contextualizer.core.use_cases.translate_story import TranslateStory

class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.

    This declarative container defines the assembly instructions for the engine.
    """

    # 1. Configuration
    # Wrapping the settings allows overriding in tests.
    config = providers.Configuration(pydantic_settings=[settings])

    # 2. Gateways (Persistence Adapters)

    # Singleton: the context tables are parsed once per process
    context_repository = providers.Singleton(
        FileSystemContextRepository,
        base_path=providers.Callable(lambda: settings.CONTEXTS_PATH),
        fallback_country=config.FALLBACK_COUNTRY,
    )

    story_repository = providers.Singleton(
        FileSystemStoryRepository,
        base_path=providers.Callable(lambda: settings.STORIES_PATH),
    )

    # 3. Use Cases (Application Logic)

    # Factory: new instance per request, Singleton repositories injected.
    translate_story_use_case = providers.Factory(
        TranslateStory,
        stories=story_repository,
        contexts=context_repository,
        source_population=config.SOURCE_POPULATION,
        preferred_source=config.PREFERRED_TRANSLATION_SOURCE,
        default_language=config.DEFAULT_LANGUAGE,
    )

# Instantiate the container for global access (e.g. by batch jobs)
container = Container()
