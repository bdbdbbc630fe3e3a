# contextualizer/bootstrap.py
import structlog

from contextualizer.shared.config import settings
from contextualizer.shared.container import Container, container
from contextualizer.shared.logging_config import configure_logging
from contextualizer.shared.observability import setup_observability

logger = structlog.get_logger()

def init_app(warmup: bool = False) -> Container:
    """
    Process start-up for anything embedding the engine (web app, batch image
    generation, exports).

    1. Configures structlog and the tracer provider.
    2. Optionally loads the context tables eagerly, so worker processes
       forked afterwards share the parsed data.
    """
    configure_logging()
    setup_observability()

    if warmup:
        container.context_repository().warmup()

    logger.info(
        "engine_initialized",
        env=settings.APP_ENV.value,
        data_dir=settings.DATA_DIR,
        source_country=settings.SOURCE_COUNTRY,
        source_population=settings.SOURCE_POPULATION,
    )
    return container
