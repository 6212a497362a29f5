"""
Catalog Loader

Loads the single versioned quiz + career table that both the catalog
endpoint (UI display) and the scoring engine consume.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError

from .config import CATALOG_PATH
from .schema import Catalog

logger = logging.getLogger(__name__)

_CATALOG_CACHE: Dict[str, Catalog] = {}


class CatalogError(ValueError):
    """Raised when the catalog file cannot be read or does not validate."""


def parse_catalog(data: Dict) -> Catalog:
    """Validate a raw catalog mapping."""
    try:
        catalog = Catalog.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog data: {e}") from e

    missing = catalog.unknown_endorsements()
    if missing:
        # Endorsements of careers outside the catalog are ignored when scoring
        logger.debug(f"Catalog {catalog.version}: {len(missing)} endorsed titles not in catalog: {missing}")
    return catalog


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """
    Load and cache the catalog.

    Args:
        path: Optional path to a catalog JSON file (defaults to the bundled table)

    Returns:
        Validated, immutable Catalog

    Raises:
        CatalogError: If the file is missing, is not JSON, or fails validation
    """
    resolved = Path(path) if path else CATALOG_PATH
    key = str(resolved)
    if key in _CATALOG_CACHE:
        return _CATALOG_CACHE[key]

    try:
        with open(resolved, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {resolved}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file is not valid JSON: {resolved}: {e}") from e

    catalog = parse_catalog(data)
    logger.info(
        f"Loaded catalog {catalog.version}: {len(catalog.questions)} questions, "
        f"{len(catalog.careers)} careers"
    )
    _CATALOG_CACHE[key] = catalog
    return catalog


def clear_catalog_cache() -> None:
    _CATALOG_CACHE.clear()
