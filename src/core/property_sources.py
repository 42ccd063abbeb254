"""Property sources backing the configuration environment.

A property source is a named holder of configuration values. Every source
supports point lookups; an *enumerable* source can additionally list all of
its property names, which is what the startup report needs to discover keys.

Concrete sources:
- **MapPropertySource**: values held in a mapping
- **SystemEnvironmentPropertySource**: the process environment
- **DotEnvPropertySource**: a parsed ``.env`` file (python-dotenv)
- **SettingsPropertySource**: a pydantic model flattened to dotted keys

``PropertySources`` keeps sources in precedence order: the first source that
contains a property wins.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import BaseModel

from src.core.exceptions import PropertySourceError


class PropertySource:
    """A named source of configuration properties supporting point lookups."""

    def __init__(self, name: str) -> None:
        self.name = name

    def get_property(self, name: str) -> object | None:
        """Return the raw value for ``name`` or None if it is not defined."""
        _ = name
        return None

    def contains_property(self, name: str) -> bool:
        """Return True if this source defines ``name``."""
        return self.get_property(name) is not None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class EnumerablePropertySource(PropertySource):
    """A property source that can list all of its property names."""

    @property
    def property_names(self) -> tuple[str, ...]:
        """Names of every property defined by this source."""
        return ()

    def contains_property(self, name: str) -> bool:
        """Return True if ``name`` is one of this source's property names."""
        return name in self.property_names


class MapPropertySource(EnumerablePropertySource):
    """Property source reading from a mapping."""

    def __init__(self, name: str, source: Mapping[str, object]) -> None:
        super().__init__(name)
        self.source = source

    @property
    def property_names(self) -> tuple[str, ...]:
        """Keys of the underlying mapping."""
        return tuple(self.source.keys())

    def get_property(self, name: str) -> object | None:
        """Return the mapped value for ``name``."""
        return self.source.get(name)

    def contains_property(self, name: str) -> bool:
        """Return True if the mapping has the key, even when its value is None."""
        return name in self.source


class SystemEnvironmentPropertySource(MapPropertySource):
    """Property source over the process environment variables.

    Reads ``os.environ`` live unless an explicit mapping is supplied.
    """

    def __init__(
        self,
        name: str = "systemEnvironment",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(name, os.environ if environ is None else environ)


class DotEnvPropertySource(MapPropertySource):
    """Property source over a parsed dotenv file.

    Variables declared without a value (a bare ``KEY`` line) are kept with a
    None value, so they are listed but render as absent. Values are not
    interpolated by python-dotenv; ``${...}`` placeholders are resolved by the
    configuration environment instead.
    """

    def __init__(self, path: str | Path, name: str = "dotenv") -> None:
        self.path = Path(path)
        try:
            values = dotenv_values(self.path, interpolate=False, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Unable to read dotenv file {self.path}"
            raise PropertySourceError(msg, {"path": str(self.path)}, e) from e
        super().__init__(name, dict(values))


def _flatten_model(
    data: Mapping[str, Any], prefix: str = ""
) -> dict[str, object | None]:
    """Flatten a nested mapping into dotted keys."""
    flat: dict[str, object | None] = {}
    for key, value in data.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(_flatten_model(value, dotted))
        else:
            flat[dotted] = value
    return flat


class SettingsPropertySource(MapPropertySource):
    """Property source exposing a pydantic settings model.

    Nested models become dotted keys, e.g. ``log_config.log_level``.
    """

    def __init__(self, settings: BaseModel, name: str = "applicationSettings") -> None:
        super().__init__(name, _flatten_model(settings.model_dump(mode="json")))


class PropertySources:
    """Ordered collection of property sources, highest precedence first.

    Source names are unique: adding a source under an existing name moves it
    to the requested position.
    """

    def __init__(self, sources: list[PropertySource] | None = None) -> None:
        self._sources: list[PropertySource] = []
        for source in sources or []:
            self.add_last(source)

    def __iter__(self) -> Iterator[PropertySource]:
        return iter(list(self._sources))

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return any(source.name == name for source in self._sources)

    def contains(self, name: str) -> bool:
        """Return True if a source with this name is present."""
        return name in self

    def get(self, name: str) -> PropertySource | None:
        """Return the source registered under ``name``, if any."""
        for source in self._sources:
            if source.name == name:
                return source
        return None

    def add_first(self, source: PropertySource) -> None:
        """Add a source with the highest precedence."""
        self._discard(source.name)
        self._sources.insert(0, source)

    def add_last(self, source: PropertySource) -> None:
        """Add a source with the lowest precedence."""
        self._discard(source.name)
        self._sources.append(source)

    def add_before(self, relative_name: str, source: PropertySource) -> None:
        """Add a source with precedence just above ``relative_name``."""
        self._check_not_self(relative_name, source)
        # Fails on unknown names before anything is removed
        self._index_of(relative_name)
        self._discard(source.name)
        self._sources.insert(self._index_of(relative_name), source)

    def add_after(self, relative_name: str, source: PropertySource) -> None:
        """Add a source with precedence just below ``relative_name``."""
        self._check_not_self(relative_name, source)
        # Fails on unknown names before anything is removed
        self._index_of(relative_name)
        self._discard(source.name)
        self._sources.insert(self._index_of(relative_name) + 1, source)

    def replace(self, name: str, source: PropertySource) -> None:
        """Replace the source registered under ``name`` keeping its position."""
        self._sources[self._index_of(name)] = source

    def remove(self, name: str) -> PropertySource | None:
        """Remove and return the source registered under ``name``, if any."""
        source = self.get(name)
        if source is not None:
            self._sources.remove(source)
        return source

    def _discard(self, name: str) -> None:
        self._sources = [s for s in self._sources if s.name != name]

    def _index_of(self, name: str) -> int:
        for index, source in enumerate(self._sources):
            if source.name == name:
                return index
        msg = f"PropertySource named '{name}' does not exist"
        raise PropertySourceError(msg, {"name": name})

    @staticmethod
    def _check_not_self(relative_name: str, source: PropertySource) -> None:
        if relative_name == source.name:
            msg = (
                f"PropertySource named '{relative_name}' "
                "cannot be added relative to itself"
            )
            raise PropertySourceError(msg, {"name": relative_name})
