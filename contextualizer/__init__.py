# contextualizer/__init__.py
"""
Story Contextualizer.

Re-renders authored stories for a reader's country: names, places and
quantities are substituted with locally relatable equivalents, casualty
figures are scaled by population and compared with local historical events.

Layout follows Ports & Adapters:
- `core`: pure domain models and the translation engine (no I/O).
- `adapters`: filesystem repositories for context tables and stories.
- `shared`: configuration, logging, tracing, dependency wiring.
"""

__version__ = "1.0.0"
