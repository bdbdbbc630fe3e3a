# contextualizer/core/use_cases/translate_story.py
import structlog
from typing import List, Optional

from contextualizer.core.domain.context import DEFAULT_SOURCE_POPULATION, CountryContext
from contextualizer.core.domain.exceptions import DomainError
from contextualizer.core.domain.segments import NormalizedSegment, TranslatedStoryOutput
from contextualizer.core.domain.story import PreTranslatedStory, Story
from contextualizer.core.ports.context_repository import IContextRepository
from contextualizer.core.ports.story_repository import IStoryRepository
from contextualizer.core.translation.normalizer import TranslationOptions, normalize_text
from contextualizer.core.translation.pretranslated import parse_pretranslated
from contextualizer.core.translation.resolution import ResolutionContext
from contextualizer.core.translation.selector import SELECTOR_VERSION
from contextualizer.shared.config import TranslationSource
from contextualizer.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

TEXT_FIELDS = ("title", "summary", "content")


class TranslateStory:
    """
    Use Case: Renders a story for one reader country and language.

    Responsibilities:
    1. Loads the story and the country's context tables via the Ports.
    2. Chooses the pre-translated variant when one exists (unless the runtime
       path is forced), otherwise translates the templates at runtime.
    3. Resolves every field through a single ResolutionContext, so markers
       shared between title, summary and content agree.
    4. Traces the translation and handles domain-level errors.
    """

    def __init__(
        self,
        stories: IStoryRepository,
        contexts: IContextRepository,
        source_population: int = DEFAULT_SOURCE_POPULATION,
        preferred_source: TranslationSource = TranslationSource.AUTO,
        default_language: str = "en",
    ):
        self.stories = stories
        self.contexts = contexts
        self.source_population = source_population or DEFAULT_SOURCE_POPULATION
        self.preferred_source = TranslationSource(preferred_source or TranslationSource.AUTO)
        self.default_language = default_language or "en"

    def execute(
        self,
        slug: str,
        country_code: str,
        language: Optional[str] = None,
        contextualization_enabled: bool = True,
        preferred_source: Optional[TranslationSource] = None,
    ) -> TranslatedStoryOutput:
        """
        Executes the translation.

        Args:
            slug: Story slug (e.g., 'mahsa-amini').
            country_code: Reader country, ISO 3166-1 alpha-2 (e.g., 'CZ').
            language: Reader language (e.g., 'cs'); the configured default when omitted.
            contextualization_enabled: Whether substituted values carry
                "Original: X" tooltips.
            preferred_source: Overrides the configured path preference.

        Returns:
            TranslatedStoryOutput: segments per text field plus metadata.
        """
        language = language or self.default_language
        preference = TranslationSource(preferred_source or self.preferred_source)

        with tracer.start_as_current_span("use_case.translate_story") as span:
            span.set_attribute("app.story_slug", slug)
            span.set_attribute("app.country", country_code)
            span.set_attribute("app.language", language)
            span.set_attribute("app.preferred_source", preference.value)

            logger.info("translation_started", slug=slug, country=country_code, lang=language)

            try:
                story = self.stories.get_story(slug)
                country = self.contexts.get_country(country_code)
                ctx = ResolutionContext.for_story(story, country, language, self.source_population)
                options = TranslationOptions(
                    language=language,
                    contextualization_enabled=contextualization_enabled,
                )

                pretranslated = self._pretranslated(story, country, language, preference)
                if pretranslated is not None:
                    fields = {
                        name: self._pretranslated_field(story, pretranslated, name, ctx, options)
                        for name in TEXT_FIELDS
                    }
                    source = TranslationSource.PRE_TRANSLATED
                else:
                    fields = {
                        name: normalize_text(getattr(story, name), ctx, story, options)
                        for name in TEXT_FIELDS
                    }
                    source = TranslationSource.RUNTIME

                span.set_attribute("app.translation_source", source.value)
                span.set_attribute("app.markers_resolved", len(ctx.computations))
                logger.info(
                    "translation_success",
                    slug=slug,
                    country=country.code,
                    lang=language,
                    translation_source=source.value,
                    markers_resolved=len(ctx.computations),
                )

                return TranslatedStoryOutput(
                    id=story.id,
                    slug=story.slug,
                    metadata={
                        "country": country.code,
                        "language": language,
                        "contextualized": contextualization_enabled,
                        "translation_source": source.value,
                        "selector_version": SELECTOR_VERSION,
                    },
                    date=story.date,
                    tags=list(story.tags),
                    hashtags=story.hashtags,
                    severity=story.severity,
                    verified=story.verified,
                    source=story.source,
                    content_warning=story.content_warning,
                    **fields,
                )

            except DomainError:
                # Re-raise known domain errors (StoryNotFound, CyclicReference, etc.)
                raise
            except Exception as e:
                logger.error("translation_failed", slug=slug, country=country_code, error=str(e), exc_info=True)
                raise DomainError(f"Unexpected translation failure: {str(e)}")

    def _pretranslated(
        self,
        story: Story,
        country: CountryContext,
        language: str,
        preference: TranslationSource,
    ) -> Optional[PreTranslatedStory]:
        if preference is TranslationSource.RUNTIME:
            return None
        variant = self.stories.get_pretranslated(story.slug, language, country.code)
        if variant is None and preference is TranslationSource.PRE_TRANSLATED:
            logger.info("pretranslated_unavailable", slug=story.slug, country=country.code, lang=language)
        return variant

    @staticmethod
    def _pretranslated_field(
        story: Story,
        variant: PreTranslatedStory,
        name: str,
        ctx: ResolutionContext,
        options: TranslationOptions,
    ) -> List[NormalizedSegment]:
        text = getattr(variant, name)
        if not text:
            # Variant lacks this field; fall back to the template
            return normalize_text(getattr(story, name), ctx, story, options)
        return parse_pretranslated(text, ctx, story, options)
