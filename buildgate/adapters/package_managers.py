"""
Package manager specs — known system installers, in priority order.

Each manager spec knows how to detect itself (its binary is on PATH) and how to
build the install command for a package. The order of
``DEFAULT_PACKAGE_MANAGERS`` is the selection priority: Debian-family
first, Homebrew last.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from buildgate.adapters.base import CommandAdapter
from buildgate.core.models.command import Invocation

PACKAGE_PLACEHOLDER = "{package}"


@dataclass(frozen=True)
class PackageManagerSpec:
    """A system package manager.

    Args:
        name: Identifier (e.g. ``"apt"``).
        binary: Command whose presence on PATH means the manager exists.
        label: Human-readable platform family for guidance messages.
        install_template: argv with ``{package}`` placeholders.
        needs_sudo: Whether installs must run as root.
    """

    name: str
    binary: str
    label: str
    install_template: tuple[str, ...]
    needs_sudo: bool = True

    def is_available(self, adapter: CommandAdapter) -> bool:
        return adapter.which(self.binary) is not None

    def install_command(self, package: str) -> Invocation:
        """Build the install invocation for ``package``.

        Placeholders inside ``sh -c`` scripts are shell-quoted; plain
        argv elements are substituted as-is.
        """
        is_script = len(self.install_template) >= 2 and self.install_template[1] == "-c"
        value = shlex.quote(package) if is_script else package
        argv = tuple(part.replace(PACKAGE_PLACEHOLDER, value) for part in self.install_template)
        return Invocation(argv=argv, needs_sudo=self.needs_sudo)


APT = PackageManagerSpec(
    name="apt",
    binary="apt",
    label="Ubuntu/Debian",
    # the package index may be stale on fresh images
    install_template=("sh", "-c", "apt update && apt install -y {package}"),
)

DNF = PackageManagerSpec(
    name="dnf",
    binary="dnf",
    label="Fedora/RHEL 8+",
    install_template=("dnf", "install", "-y", "{package}"),
)

YUM = PackageManagerSpec(
    name="yum",
    binary="yum",
    label="CentOS/RHEL 7",
    install_template=("yum", "install", "-y", "{package}"),
)

PACMAN = PackageManagerSpec(
    name="pacman",
    binary="pacman",
    label="Arch",
    install_template=("pacman", "-Sy", "--noconfirm", "{package}"),
)

ZYPPER = PackageManagerSpec(
    name="zypper",
    binary="zypper",
    label="openSUSE",
    install_template=("zypper", "install", "-y", "{package}"),
)

BREW = PackageManagerSpec(
    name="brew",
    binary="brew",
    label="macOS (Homebrew)",
    install_template=("brew", "install", "{package}"),
    needs_sudo=False,
)

DEFAULT_PACKAGE_MANAGERS: tuple[PackageManagerSpec, ...] = (
    APT,
    DNF,
    YUM,
    PACMAN,
    ZYPPER,
    BREW,
)


def manual_install_hint(command: str, package: str) -> list[str]:
    """Guidance lines for installing a package by hand."""
    return [
        f"Please install '{command}' manually.",
        f"Common package names for '{command}':",
        f"  - Ubuntu/Debian: '{package}' (apt)",
        f"  - Fedora/RHEL: '{package}' (dnf/yum)",
        f"  - Arch: '{package}' (pacman)",
        f"  - macOS: try 'brew install {package}'",
    ]
