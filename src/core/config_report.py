"""Startup report of the effective configuration.

Logs every property known to the configuration environment once the
application has started, one line per property in sorted order. Values of
properties whose name looks sensitive are replaced by a fixed marker.

Sensitivity is a plain case-insensitive substring test against
``SENSITIVE_PROPERTY_PATTERNS``: ``cache.TOKEN_TTL`` is masked because it
contains ``token``. Blank values are logged as they are.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, Protocol

from loguru import logger

from src.core.exceptions import PlaceholderResolutionError
from src.core.property_sources import EnumerablePropertySource, PropertySource

SENSITIVE_PROPERTY_PATTERNS: Final[frozenset[str]] = frozenset(
    pattern.lower()
    for pattern in (
        "apikey",
        "credentials",
        "passcode",
        "password",
        "private",
        "secret",
        "token",
    )
)

SENSITIVE_VALUE_MARKER: Final[str] = "<sensitive value not logged>"
REPORT_HEADER: Final[str] = "====== Environment and configuration ======"
REPORT_FOOTER: Final[str] = "==========================================="


class ReportableEnvironment(Protocol):
    """What the reporter needs from a configuration environment."""

    @property
    def active_profiles(self) -> tuple[str, ...]:
        """Active profile names."""
        ...

    @property
    def property_sources(self) -> Iterable[PropertySource]:
        """Property sources in precedence order."""
        ...

    def get_property(self, key: str) -> str | None:
        """Resolve a property value across sources."""
        ...


def is_sensitive_property(name: str) -> bool:
    """Check if a property name suggests it holds secret material.

    Args:
        name: The property name to check.

    Returns:
        bool: True if the lowercased name contains any sensitive pattern.
    """
    lowered = name.lower()
    return any(pattern in lowered for pattern in SENSITIVE_PROPERTY_PATTERNS)


def format_profiles(profiles: Iterable[str]) -> str:
    """Render profile names as ``[a, b]`` (``[]`` when there are none)."""
    return "[" + ", ".join(profiles) + "]"


def describe_error(name: str, error: Exception) -> str:
    """Return the error detail logged for ``name``.

    For sensitive properties the raw text quoted by a placeholder failure is
    replaced by the marker.
    """
    detail = str(error)
    if (
        isinstance(error, PlaceholderResolutionError)
        and is_sensitive_property(name)
        and error.value.strip()
    ):
        detail = detail.replace(error.value, SENSITIVE_VALUE_MARKER)
    return detail


def collect_property_names(sources: Iterable[PropertySource]) -> list[str]:
    """Return the sorted, de-duplicated names of all enumerable sources.

    Sources that cannot list their names are skipped.
    """
    names: set[str] = set()
    for source in sources:
        if isinstance(source, EnumerablePropertySource):
            names.update(source.property_names)
    return sorted(names)


class StartupConfigReporter:
    """Logs the effective configuration, masking sensitive values."""

    def report(self, env: ReportableEnvironment) -> None:
        """Log every known property of ``env``.

        A property whose value cannot be resolved is reported as an error
        line and does not stop the report.

        Args:
            env: Configuration environment to report.
        """
        logger.info(REPORT_HEADER)
        logger.info("Active profiles: {}", format_profiles(env.active_profiles))

        for name in collect_property_names(env.property_sources):
            try:
                value = env.get_property(name)
                if is_sensitive_property(name) and value is not None and value.strip():
                    logger.info("{}: {}", name, SENSITIVE_VALUE_MARKER)
                else:
                    logger.info("{}: {}", name, value)
            except Exception as e:  # noqa: BLE001
                logger.error(
                    "{}: error reading value: {}", name, describe_error(name, e)
                )

        logger.info(REPORT_FOOTER)
