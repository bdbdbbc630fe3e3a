# contextualizer/core/ports/context_repository.py
from typing import List, Protocol

from contextualizer.core.domain.context import CountryContext


class IContextRepository(Protocol):
    """
    Port for the static per-country context tables.
    Implementations load once and hand out shared, read-only contexts.
    """

    def get_country(self, country_code: str) -> CountryContext:
        """
        Returns the assembled context for one country.

        Args:
            country_code: ISO 3166-1 alpha-2 code (e.g., 'CZ'), case-insensitive.

        Raises:
            CountryNotFoundError: if the tables have no entry for the code.
        """
        ...

    def list_countries(self) -> List[str]:
        """Codes of every country with context data."""
        ...
