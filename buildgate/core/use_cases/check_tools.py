"""
Tools check use case — read-only report on required tools and installers.

Never installs anything: answers "what would a run need to install, and
with which package manager?".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from buildgate.adapters.base import CommandAdapter
from buildgate.adapters.registry import PackageManagerRegistry
from buildgate.core.config.loader import ConfigError, resolve_pipeline
from buildgate.core.engine.resolver import DependencyResolver

logger = logging.getLogger(__name__)


@dataclass
class ToolStatus:
    command: str
    package: str
    path: str | None = None

    @property
    def available(self) -> bool:
        return self.path is not None

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "package": self.package,
            "available": self.available,
            "path": self.path,
        }


@dataclass
class ToolsReport:
    """Presence of each required tool plus the installer that would be used."""

    tools: list[ToolStatus] = field(default_factory=list)
    package_manager: str | None = None
    error: str | None = None

    @property
    def missing(self) -> list[ToolStatus]:
        return [t for t in self.tools if not t.available]

    @property
    def all_available(self) -> bool:
        return self.error is None and not self.missing

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "all_available": self.all_available,
            "package_manager": self.package_manager,
            "tools": [t.to_dict() for t in self.tools],
            "missing": [t.command for t in self.missing],
        }


def check_tools(
    adapter: CommandAdapter,
    config_path: Path | None = None,
    registry: PackageManagerRegistry | None = None,
) -> ToolsReport:
    """Probe every required tool without installing anything."""
    report = ToolsReport()

    try:
        pipeline, _ = resolve_pipeline(config_path=config_path)
    except ConfigError as e:
        report.error = str(e)
        return report

    resolver = DependencyResolver(adapter, registry=registry)
    for requirement in pipeline.tools:
        report.tools.append(
            ToolStatus(
                command=requirement.command,
                package=requirement.package,
                path=resolver.probe(requirement),
            )
        )

    if report.missing:
        manager = resolver.registry.detect_available()
        report.package_manager = manager.name if manager else None

    logger.info("Tools check: %d/%d available", len(report.tools) - len(report.missing), len(report.tools))
    return report
