# contextualizer/adapters/persistence/context_loader.py
"""
adapters/persistence/context_loader.py
======================================

Load the static per-country context tables from a directory of JSON files
and assemble one CountryContext per country.

Layout
------
    <contexts>/
        countries.json           {"countries": [{"code": "CZ", "population": ..., ...}]}
        names.json               {"CZ": {"male": [...], "female": [...], "neutral": [...]}}
        places.json              {"CZ": {"cities": [...], "generic": {...}}}
        comparable-events.json   {"CZ": [{"id": "lidice", "casualties": 340, ...}]}
        country-languages.json   optional: {"countries": {"CZ": {"languages": ["cs"]}}}

Fallbacks
---------
- Countries without name pools or a place hierarchy borrow those of the
  fallback country (US by default).
- Comparable events never fall back: a country without events simply gets no
  comparisons.

Error behaviour
---------------
- Missing required files, invalid JSON and records that fail validation raise
  InvalidContextDataError naming the file.
- Unknown country codes raise CountryNotFoundError.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from contextualizer.core.domain.context import ComparableEvent, CountryContext, NamePools, PlaceHierarchy
from contextualizer.core.domain.exceptions import CountryNotFoundError, InvalidContextDataError

logger = structlog.get_logger()

COUNTRIES_FILE = "countries.json"
NAMES_FILE = "names.json"
PLACES_FILE = "places.json"
EVENTS_FILE = "comparable-events.json"
LANGUAGES_FILE = "country-languages.json"

_NAMES_ADAPTER = TypeAdapter(Dict[str, NamePools])
_PLACES_ADAPTER = TypeAdapter(Dict[str, PlaceHierarchy])
_EVENTS_ADAPTER = TypeAdapter(Dict[str, List[ComparableEvent]])


# ---------------------------------------------------------------------------
# Loaded tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContextTables:
    # code -> raw country record (validated when a country is assembled)
    countries: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    names: Dict[str, NamePools] = field(default_factory=dict)
    places: Dict[str, PlaceHierarchy] = field(default_factory=dict)
    events: Dict[str, List[ComparableEvent]] = field(default_factory=dict)
    languages: Dict[str, List[str]] = field(default_factory=dict)


def normalize_country_code(code: str) -> str:
    if not isinstance(code, str) or not code.strip():
        raise CountryNotFoundError(str(code))
    return code.strip().upper()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path, required: bool = True) -> Optional[Any]:
    if not path.is_file():
        if required:
            raise InvalidContextDataError(str(path), "file not found")
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidContextDataError(str(path), f"invalid JSON ({e.msg} at line {e.lineno})") from e


def _by_code(data: Any, path: Path) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidContextDataError(str(path), "root must be an object keyed by country code")
    return {normalize_country_code(code): value for code, value in data.items()}


def _validate(adapter: TypeAdapter, data: Dict[str, Any], path: Path) -> Any:
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidContextDataError(str(path), str(e)) from e


def _country_records(data: Any, path: Path) -> Dict[str, Dict[str, Any]]:
    if not isinstance(data, dict) or not isinstance(data.get("countries"), list):
        raise InvalidContextDataError(str(path), "expected {'countries': [...]}")

    records: Dict[str, Dict[str, Any]] = {}
    for index, record in enumerate(data["countries"]):
        if not isinstance(record, dict) or "code" not in record:
            raise InvalidContextDataError(str(path), f"country #{index} has no 'code'")
        code = normalize_country_code(record["code"])
        if code in records:
            logger.warning("context_country_duplicate", code=code, path=str(path))
        records[code] = {**record, "code": code}
    return records


def _country_languages(data: Any, path: Path) -> Dict[str, List[str]]:
    if data is None:
        return {}
    countries = data.get("countries") if isinstance(data, dict) else None
    if not isinstance(countries, dict):
        raise InvalidContextDataError(str(path), "expected {'countries': {CODE: {'languages': [...]}}}")
    return {
        normalize_country_code(code): list((entry or {}).get("languages", []))
        for code, entry in countries.items()
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_context_tables(contexts_dir: Path | str) -> ContextTables:
    """Read and validate every table under `contexts_dir`."""
    base = Path(contexts_dir)

    countries_path = base / COUNTRIES_FILE
    names_path = base / NAMES_FILE
    places_path = base / PLACES_FILE
    events_path = base / EVENTS_FILE
    languages_path = base / LANGUAGES_FILE

    tables = ContextTables(
        countries=_country_records(_load_json_file(countries_path), countries_path),
        names=_validate(_NAMES_ADAPTER, _by_code(_load_json_file(names_path), names_path), names_path),
        places=_validate(_PLACES_ADAPTER, _by_code(_load_json_file(places_path), places_path), places_path),
        events=_validate(
            _EVENTS_ADAPTER,
            _by_code(_load_json_file(events_path, required=False), events_path),
            events_path,
        ),
        languages=_country_languages(_load_json_file(languages_path, required=False), languages_path),
    )

    logger.info(
        "context_tables_loaded",
        path=str(base),
        countries=len(tables.countries),
        with_events=len(tables.events),
    )
    return tables


def assemble_country(code: str, tables: ContextTables, fallback_country: str = "US") -> CountryContext:
    """Build the CountryContext for one country, applying table fallbacks."""
    code = normalize_country_code(code)
    record = tables.countries.get(code)
    if record is None:
        raise CountryNotFoundError(code)

    fallback = normalize_country_code(fallback_country)

    names = tables.names.get(code)
    if names is None or names.is_empty():
        names = tables.names.get(fallback, NamePools())
        logger.info("context_fallback_used", country=code, table="names", fallback=fallback)

    places = tables.places.get(code)
    if places is None or not (places.cities or places.generic.model_dump(exclude_defaults=True)):
        places = tables.places.get(fallback, PlaceHierarchy())
        logger.info("context_fallback_used", country=code, table="places", fallback=fallback)

    languages = tables.languages.get(code) or record.get("languages", [])

    try:
        return CountryContext.model_validate({
            **record,
            "languages": languages,
            "names": names,
            "places": places,
            "comparable_events": tables.events.get(code, []),
        })
    except ValidationError as e:
        raise InvalidContextDataError(COUNTRIES_FILE, f"{code}: {e}") from e
