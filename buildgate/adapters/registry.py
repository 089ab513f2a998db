"""
Package manager registry — first-match selection over known installers.

The registry walks its managers in fixed priority order and picks the
first one present on the host. The pick is cached: once a pipeline run
has chosen a manager it keeps using it, no re-probing mid-run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from buildgate.adapters.base import CommandAdapter
from buildgate.adapters.package_managers import DEFAULT_PACKAGE_MANAGERS, PackageManagerSpec

logger = logging.getLogger(__name__)


class PackageManagerRegistry:
    """Ordered registry of package managers.

    Features:
        - Fixed priority order (constructor order)
        - First-available detection, cached for the registry's lifetime
        - Availability report across every known manager
    """

    def __init__(
        self,
        adapter: CommandAdapter,
        managers: Iterable[PackageManagerSpec] = DEFAULT_PACKAGE_MANAGERS,
    ):
        self._adapter = adapter
        self._managers: tuple[PackageManagerSpec, ...] = tuple(managers)
        self._detected: PackageManagerSpec | None = None
        self._probed = False

        names = [m.name for m in self._managers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate package manager names: {names}")

    @property
    def managers(self) -> tuple[PackageManagerSpec, ...]:
        """All known managers, highest priority first."""
        return self._managers

    def get(self, name: str) -> PackageManagerSpec | None:
        """Look up a manager by name."""
        for manager in self._managers:
            if manager.name == name:
                return manager
        return None

    def detect_available(self) -> PackageManagerSpec | None:
        """Return the highest-priority manager present on this host.

        The first call probes; later calls return the same answer.
        """
        if not self._probed:
            self._detected = self._probe()
            self._probed = True
        return self._detected

    def _probe(self) -> PackageManagerSpec | None:
        for manager in self._managers:
            if manager.is_available(self._adapter):
                logger.info("Detected package manager: %s", manager.name)
                return manager
        logger.info("No supported package manager detected")
        return None

    def availability(self) -> dict[str, bool]:
        """Probe every manager (uncached) — name → available."""
        return {m.name: m.is_available(self._adapter) for m in self._managers}

    def reset(self) -> None:
        """Forget the cached detection result."""
        self._detected = None
        self._probed = False
