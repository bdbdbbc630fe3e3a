# contextualizer/adapters/persistence/context_cache.py
"""
Process-wide cache for context tables and assembled countries.

Tables are parsed once per contexts directory and CountryContexts are built
once per (directory, country, fallback); both are immutable afterwards, so
batch jobs running many threads share them freely. Creation is
double-checked under a re-entrant lock.

This module does not persist anything to disk.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Tuple

from contextualizer.adapters.persistence.context_loader import (
    ContextTables,
    assemble_country,
    load_context_tables,
    normalize_country_code,
)
from contextualizer.core.domain.context import CountryContext

# ---------------------------------------------------------------------------
# Internal state
# ---------------------------------------------------------------------------

# Map: resolved contexts directory -> loaded tables
_TABLE_CACHE: Dict[str, ContextTables] = {}

# Map: (directory, country code, fallback code) -> assembled context
_COUNTRY_CACHE: Dict[Tuple[str, str, str], CountryContext] = {}

_CACHE_LOCK = threading.RLock()


def _norm_dir(contexts_dir: Path | str) -> str:
    return str(Path(contexts_dir).resolve())


# ---------------------------------------------------------------------------
# Core cache API
# ---------------------------------------------------------------------------


def get_or_load_tables(contexts_dir: Path | str) -> ContextTables:
    """
    Tables for `contexts_dir`, loading and caching them on first use.

    Raises:
        InvalidContextDataError: bubbled from the loader.
    """
    key = _norm_dir(contexts_dir)

    existing = _TABLE_CACHE.get(key)
    if existing is not None:
        return existing

    with _CACHE_LOCK:
        existing = _TABLE_CACHE.get(key)
        if existing is not None:
            return existing
        tables = load_context_tables(key)
        _TABLE_CACHE[key] = tables
        return tables


def get_or_build_country(contexts_dir: Path | str, code: str, fallback_country: str = "US") -> CountryContext:
    key = (_norm_dir(contexts_dir), normalize_country_code(code), normalize_country_code(fallback_country))

    existing = _COUNTRY_CACHE.get(key)
    if existing is not None:
        return existing

    with _CACHE_LOCK:
        existing = _COUNTRY_CACHE.get(key)
        if existing is not None:
            return existing
        country = assemble_country(key[1], get_or_load_tables(contexts_dir), key[2])
        _COUNTRY_CACHE[key] = country
        return country


def set_tables(contexts_dir: Path | str, tables: ContextTables) -> None:
    """
    Manually insert or override the tables for a directory.
    Useful for tests; drops countries assembled from the previous tables.
    """
    key = _norm_dir(contexts_dir)
    with _CACHE_LOCK:
        _TABLE_CACHE[key] = tables
        for cached in [k for k in _COUNTRY_CACHE if k[0] == key]:
            del _COUNTRY_CACHE[cached]


def clear_cache() -> None:
    with _CACHE_LOCK:
        _TABLE_CACHE.clear()
        _COUNTRY_CACHE.clear()


def cached_directories() -> List[str]:
    with _CACHE_LOCK:
        return sorted(_TABLE_CACHE)


__all__ = [
    "get_or_load_tables",
    "get_or_build_country",
    "set_tables",
    "clear_cache",
    "cached_directories",
]
