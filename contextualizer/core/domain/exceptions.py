# contextualizer/core/domain/exceptions.py
from typing import Sequence


class DomainError(Exception):
    """Base class for all domain-level exceptions."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

# --- Entity Not Found Errors ---

class CountryNotFoundError(DomainError):
    """Raised when no context tables exist for a requested country code."""
    def __init__(self, country_code: str):
        self.country_code = country_code
        super().__init__(f"Country '{country_code}' has no context data.")

class StoryNotFoundError(DomainError):
    """Raised when a story slug cannot be located in the story repository."""
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Story '{slug}' not found.")

class MarkerNotFoundError(DomainError):
    """Raised when a marker references another marker key that the story does not define."""
    def __init__(self, key: str, referenced_by: str):
        self.key = key
        self.referenced_by = referenced_by
        super().__init__(f"Marker '{referenced_by}' references undefined marker '{key}'.")

# --- Resolution Errors ---

class CyclicReferenceError(DomainError):
    """Raised when alias or parent references loop back onto a marker being resolved."""
    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Cyclic marker reference: {' -> '.join(self.chain)}")

class EmptyCandidatePoolError(DomainError):
    """Raised when a deterministic selection is attempted over an empty candidate list."""
    def __init__(self, seed: str):
        self.seed = seed
        super().__init__(f"No candidates to select from (seed '{seed}').")

# --- Validation Errors ---

class InvalidContextDataError(DomainError):
    """Raised when static country context tables fail validation."""
    def __init__(self, source: str, details: str):
        self.source = source
        super().__init__(f"Invalid context data in '{source}': {details}")

class InvalidStoryDataError(DomainError):
    """Raised when a story file exists but does not describe a valid story."""
    def __init__(self, slug: str, details: str):
        self.slug = slug
        super().__init__(f"Invalid story data for '{slug}': {details}")
