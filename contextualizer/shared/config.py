# contextualizer/shared/config.py
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum
from typing import Optional

from contextualizer.core.domain.context import DEFAULT_SOURCE_POPULATION

class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"

class TranslationSource(str, Enum):
    AUTO = "auto"
    RUNTIME = "runtime"
    PRE_TRANSLATED = "pre-translated"

class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic.
    """

    # --- Application Meta ---
    APP_NAME: str = "story-contextualizer"
    APP_ENV: AppEnv = AppEnv.DEVELOPMENT
    DEBUG: bool = False

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    OTEL_SERVICE_NAME: str = "contextualizer"
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    # --- Static Data ---
    # Root holding 'contexts/' (country tables) and 'stories/' (authored stories)
    DATA_DIR: str = "data"

    # --- Contextualization ---
    # Country the stories were authored for; its population is the scaling baseline.
    SOURCE_COUNTRY: str = "IR"
    SOURCE_POPULATION: int = DEFAULT_SOURCE_POPULATION

    # Country whose name pools / place hierarchy stand in for countries without their own
    FALLBACK_COUNTRY: str = "US"
    DEFAULT_LANGUAGE: str = "en"
    PREFERRED_TRANSLATION_SOURCE: TranslationSource = TranslationSource.AUTO

    # --- Dynamic Path Resolution ---

    @property
    def CONTEXTS_PATH(self) -> str:
        """Directory with countries.json, names.json, places.json, comparable-events.json"""
        return os.path.join(self.DATA_DIR, "contexts")

    @property
    def STORIES_PATH(self) -> str:
        """Directory with one folder per story slug"""
        return os.path.join(self.DATA_DIR, "stories")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
