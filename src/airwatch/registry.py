# Airwatch: scheduled air quality alerts and on-demand checks
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Data source registry for Airwatch.

This module provides a simple registry for air quality data sources. Each
source is registered as a SourceSpec (a name, a factory and whether it needs
an API key) and can be retrieved by name, so the configured source can be
chosen with a single setting.

The registry is just a dictionary. Sources register themselves when their
modules are imported.

Example:
    >>> from airwatch.registry import create_repository, list_sources
    >>> import airwatch.sources  # registers the built-in sources
    >>> list_sources()
    ['IQAIR']
    >>> repository = create_repository("iqair", api_key="...")
"""

import warnings
from typing import Callable, Dict, TypedDict

from .types import AirQualityRepository


class SourceSpec(TypedDict):
    """
    Specification for a data source.

    Attributes:
        name: Human-readable name
        create: Factory taking the API key (and optional keyword settings)
            and returning a repository
        requires_api_key: Whether create() needs a non-empty key
    """

    name: str
    create: Callable[..., AirQualityRepository]
    requires_api_key: bool


# The global registry - just a dictionary mapping names to SourceSpecs
_SOURCES: Dict[str, SourceSpec] = {}


def register_source(name: str, spec: SourceSpec) -> None:
    """
    Register a data source in the global registry.

    Sources are identified by name (case-insensitive). If a source with the
    same name already exists, it will be replaced with a warning.
    """
    normalized_name = name.upper()

    if normalized_name in _SOURCES:
        warnings.warn(
            f"Source '{normalized_name}' is already registered and will be replaced",
            UserWarning,
            stacklevel=2,
        )

    _SOURCES[normalized_name] = spec


def get_source(name: str) -> SourceSpec | None:
    """Retrieve a registered source by name (case-insensitive)."""
    return _SOURCES.get(name.upper())


def list_sources() -> list[str]:
    """Get a sorted list of all registered source names."""
    return sorted(_SOURCES.keys())


def create_repository(name: str, api_key: str | None = None, **options) -> AirQualityRepository:
    """
    Build a repository for a registered source.

    Args:
        name: Source name (case-insensitive)
        api_key: API key, required when the source says so
        **options: Passed through to the source factory

    Returns:
        AirQualityRepository: Ready-to-use repository

    Raises:
        ValueError: If the source is unknown or a required key is missing
    """
    spec = get_source(name)
    if spec is None:
        raise ValueError(
            f"Unknown data source: {name}. Available sources: {list_sources()}"
        )

    if spec["requires_api_key"] and not api_key:
        raise ValueError(f"Data source {spec['name']} requires an API key")

    return spec["create"](api_key, **options)
