"""Configuration environment: active profiles plus ordered property sources.

The environment answers merged lookups across its sources. The first source
(in precedence order) that contains a property supplies its value, and
``${name}`` / ``${name:default}`` placeholders inside string values are
resolved recursively against the same environment.

Lookups raise ``PlaceholderResolutionError`` for placeholders that cannot be
resolved and for circular references; callers that must not fail (such as
the startup report) handle that per property.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Final

from loguru import logger

from src.core.config import Settings
from src.core.exceptions import PlaceholderResolutionError
from src.core.property_sources import (
    DotEnvPropertySource,
    PropertySources,
    SettingsPropertySource,
    SystemEnvironmentPropertySource,
)

PLACEHOLDER_PREFIX: Final[str] = "${"
PLACEHOLDER_SUFFIX: Final[str] = "}"
VALUE_SEPARATOR: Final[str] = ":"

SYSTEM_ENVIRONMENT_SOURCE_NAME: Final[str] = "systemEnvironment"
DOTENV_SOURCE_NAME: Final[str] = "dotenv"
SETTINGS_SOURCE_NAME: Final[str] = "applicationSettings"


def to_property_string(value: object) -> str | None:
    """Render a raw source value as a property string.

    Args:
        value: The raw value held by a property source.

    Returns:
        str | None: ``true``/``false`` for booleans, comma joined items for
            sequences, ``str(value)`` otherwise; None stays None.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join("" if item is None else str(item) for item in value)
    return str(value)


def _find_placeholder_end(text: str, start: int) -> int:
    """Return the index of the suffix closing the placeholder opened at ``start``."""
    index = start + len(PLACEHOLDER_PREFIX)
    depth = 0
    while index < len(text):
        if text.startswith(PLACEHOLDER_PREFIX, index):
            depth += 1
            index += len(PLACEHOLDER_PREFIX)
        elif text.startswith(PLACEHOLDER_SUFFIX, index):
            if depth == 0:
                return index
            depth -= 1
            index += len(PLACEHOLDER_SUFFIX)
        else:
            index += 1
    return -1


class ConfigurationEnvironment:
    """Active profiles and an ordered set of property sources.

    Args:
        property_sources: Sources in precedence order (highest first).
        active_profiles: Names of the profiles active in this run.
    """

    def __init__(
        self,
        property_sources: PropertySources | None = None,
        active_profiles: Iterable[str] = (),
    ) -> None:
        self.property_sources = (
            property_sources if property_sources is not None else PropertySources()
        )
        self._active_profiles = tuple(active_profiles)

    @property
    def active_profiles(self) -> tuple[str, ...]:
        """Names of the active profiles, in declaration order."""
        return self._active_profiles

    def accepts_profiles(self, *profiles: str) -> bool:
        """Return True if any of the given profiles is active.

        A profile prefixed with ``!`` matches when that profile is NOT active.
        """
        for profile in profiles:
            if profile.startswith("!"):
                if profile[1:] not in self._active_profiles:
                    return True
            elif profile in self._active_profiles:
                return True
        return False

    def contains_property(self, key: str) -> bool:
        """Return True if any source defines ``key``."""
        return any(source.contains_property(key) for source in self.property_sources)

    def get_property(self, key: str, default: str | None = None) -> str | None:
        """Resolve ``key`` against the property sources.

        Args:
            key: Property name.
            default: Returned when no source defines the key.

        Returns:
            str | None: The resolved value, placeholders expanded.

        Raises:
            PlaceholderResolutionError: If a placeholder in the value cannot be
                resolved or refers back to itself.
        """
        return self._get_property(key, default, frozenset())

    def _get_property(
        self, key: str, default: str | None, visited: frozenset[str]
    ) -> str | None:
        for source in self.property_sources:
            if source.contains_property(key):
                value = to_property_string(source.get_property(key))
                logger.trace(
                    "Found property '{}' in source '{}'",
                    key,
                    source.name,
                )
                if value is None:
                    return None
                return self._resolve_placeholders(value, visited | {key})
        return default

    def resolve_placeholders(self, text: str) -> str:
        """Expand every ``${...}`` placeholder in ``text``.

        Raises:
            PlaceholderResolutionError: If a placeholder cannot be resolved.
        """
        return self._resolve_placeholders(text, frozenset())

    def _resolve_placeholders(self, text: str, visited: frozenset[str]) -> str:
        start = text.find(PLACEHOLDER_PREFIX)
        if start == -1:
            return text

        result: list[str] = []
        position = 0
        while start != -1:
            end = _find_placeholder_end(text, start)
            if end == -1:
                # Unterminated placeholders are kept literally
                break
            result.append(text[position:start])
            expression = text[start + len(PLACEHOLDER_PREFIX) : end]
            # The placeholder name may itself contain placeholders
            expression = self._resolve_placeholders(expression, visited)
            name, separator, fallback = expression.partition(VALUE_SEPARATOR)

            if name in visited:
                msg = (
                    f"Circular placeholder reference '{name}' "
                    "in property definitions"
                )
                raise PlaceholderResolutionError(msg, name, text)

            value = self._get_property(name, None, visited)
            if value is None and separator:
                value = self._resolve_placeholders(fallback, visited)
            if value is None:
                msg = f"Could not resolve placeholder '{name}' in value \"{text}\""
                raise PlaceholderResolutionError(msg, name, text)

            result.append(value)
            position = end + len(PLACEHOLDER_SUFFIX)
            start = text.find(PLACEHOLDER_PREFIX, position)

        result.append(text[position:])
        return "".join(result)

    def __repr__(self) -> str:
        names = [source.name for source in self.property_sources]
        return (
            f"ConfigurationEnvironment(active_profiles={list(self._active_profiles)}, "
            f"property_sources={names})"
        )


def build_environment(
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> ConfigurationEnvironment:
    """Assemble the configuration environment of the running service.

    Sources in precedence order mirror how the settings themselves are loaded:
    OS environment variables, then the dotenv file (only when it exists), then
    the settings model.

    Args:
        settings: Application settings.
        environ: Environment variables to expose; defaults to ``os.environ``.

    Returns:
        ConfigurationEnvironment: Environment ready to be reported.
    """
    sources = PropertySources()
    report_config = settings.report_config

    if report_config.include_system_environment:
        sources.add_last(
            SystemEnvironmentPropertySource(SYSTEM_ENVIRONMENT_SOURCE_NAME, environ)
        )

    dotenv_path = Path(report_config.dotenv_path)
    if dotenv_path.is_file():
        sources.add_last(DotEnvPropertySource(dotenv_path, DOTENV_SOURCE_NAME))
    else:
        logger.debug("No dotenv file at {}, skipping", dotenv_path)

    sources.add_last(SettingsPropertySource(settings, SETTINGS_SOURCE_NAME))

    return ConfigurationEnvironment(sources, settings.active_profiles)
