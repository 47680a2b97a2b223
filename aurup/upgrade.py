"""Detection and presentation of pending package upgrades."""

from __future__ import annotations

import enum
import logging
import zlib
from dataclasses import dataclass, field
from typing import List, Mapping, Protocol, Sequence

from .version import vercmp, version_diff

log = logging.getLogger(__name__)

_BOLD = "\x1b[1m"
_MAGENTA = "\x1b[35m"
_CYAN = "\x1b[36m"
_RESET = "\x1b[0m"
_PALETTE = ("\x1b[31m", "\x1b[32m", "\x1b[33m", "\x1b[34m", "\x1b[35m", "\x1b[36m")


def _bold(text: str) -> str:
    return f"{_BOLD}{text}{_RESET}"


def _magenta(text: str) -> str:
    return f"{_MAGENTA}{text}{_RESET}"


def _cyan(text: str) -> str:
    return f"{_CYAN}{text}{_RESET}"


def _color_hash(text: str) -> str:
    colour = _PALETTE[zlib.crc32(text.encode("utf-8")) % len(_PALETTE)]
    return f"{colour}{text}{_RESET}"


def _rune_key(text: str) -> List[tuple]:
    """Order case-insensitively first, then by the original characters."""
    return [(char.lower(), char) for char in text]


class Reason(enum.IntEnum):
    """Why a package is installed."""

    EXPLICIT = 0
    DEPEND = 1


@dataclass
class InstalledPackage:
    """A package present in the local database."""

    name: str
    version: str = ""
    base: str = ""
    reason: Reason = Reason.EXPLICIT
    build_date: int = 0
    installed_size: int = 0
    should_ignore: bool = False


@dataclass
class AURPackage:
    """Package information as published by the AUR."""

    name: str
    version: str = ""
    package_base: str = ""
    last_modified: int = 0


@dataclass
class Upgrade:
    """One pending upgrade of a package."""

    name: str
    repository: str = ""
    local_version: str = ""
    remote_version: str = ""
    base: str = ""
    reason: Reason = Reason.EXPLICIT
    extra: str = ""


class UpgradeCheck(Protocol):
    def to_upgrade(self, pkg_name: str) -> bool: ...


def stylized_name_with_repository(upgrade: Upgrade) -> str:
    """Return ``repository/name`` with terminal styling."""
    return _bold(_color_hash(upgrade.repository)) + "/" + _bold(upgrade.name)


def _column_widths(upgrades: Sequence[Upgrade]) -> tuple:
    longest_name = max((len(stylized_name_with_repository(u)) for u in upgrades), default=0)
    longest_version = max(
        (len(version_diff(u.local_version, u.remote_version)[0]) for u in upgrades), default=0
    )
    return longest_name, longest_version


@dataclass
class UpSlice:
    """A list of upgrades with the repositories they are ordered by."""

    up: List[Upgrade] = field(default_factory=list)
    repos: List[str] = field(default_factory=list)
    pulled_deps: List[Upgrade] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.up)

    def sort(self) -> None:
        """Order by repository (known repositories first, in their order), then by name."""

        def key(upgrade: Upgrade) -> tuple:
            try:
                rank = self.repos.index(upgrade.repository)
            except ValueError:
                rank = len(self.repos)
            return rank, _rune_key(upgrade.repository), _rune_key(upgrade.name)

        self.up.sort(key=key)

    def render(self) -> str:
        """Return the numbered table of upgrades."""
        longest_name, longest_version = _column_widths(self.up)
        count = len(self.up)
        number_width = len(str(count))

        lines = []
        for position, upgrade in enumerate(self.up):
            left, right = version_diff(upgrade.local_version, upgrade.remote_version)
            number = _magenta(f"{count - position:>{number_width}}  ")
            name = f"{stylized_name_with_repository(upgrade):<{longest_name}}  "
            lines.append(f"{number}{name}{left:<{longest_version}} -> {right}\n")
            if upgrade.extra:
                lines.append(" " * number_width + " " + upgrade.extra + "\n")
        return "".join(lines)

    def render_deps(self) -> str:
        """Return the table of dependencies pulled in by the upgrade."""
        longest_name, longest_version = _column_widths(self.pulled_deps)
        number_width = len(str(len(self.pulled_deps)))
        indent = "  " + " " * number_width

        lines = []
        for upgrade in self.pulled_deps:
            left, right = version_diff(upgrade.local_version, upgrade.remote_version)
            name = f"{indent}{stylized_name_with_repository(upgrade):<{longest_name}}  "
            lines.append(f"{name}{left:<{longest_version}} -> {right}\n")
            if upgrade.extra:
                lines.append(" " * number_width + " " + upgrade.extra.lower() + "\n")
        lines.append("\n")
        return "".join(lines)


def _warn_ignored(pkg: InstalledPackage, new_version: str) -> None:
    left, right = version_diff(pkg.version, new_version)
    log.warning("%s: ignoring package upgrade (%s => %s)", _cyan(pkg.name), left, right)


def up_devel(
    remote: Mapping[str, InstalledPackage],
    aurdata: Mapping[str, AURPackage],
    store: UpgradeCheck,
) -> UpSlice:
    """Collect development packages whose tracked sources have new commits."""
    result = UpSlice(repos=["devel"])
    for pkg_name, pkg in remote.items():
        if not store.to_upgrade(pkg_name):
            continue
        if pkg_name not in aurdata:
            log.warning("ignoring package devel upgrade (no AUR info found): %s", pkg_name)
            continue
        if pkg.should_ignore:
            _warn_ignored(pkg, "latest-commit")
            continue
        result.up.append(
            Upgrade(
                name=pkg.name,
                base=pkg.base,
                repository="devel",
                local_version=pkg.version,
                remote_version="latest-commit",
                reason=pkg.reason,
            )
        )
    return result


def up_aur(
    remote: Mapping[str, InstalledPackage],
    aurdata: Mapping[str, AURPackage],
    time_update: bool,
    enable_downgrade: bool,
) -> UpSlice:
    """Collect foreign packages for which the AUR has a different version."""
    result = UpSlice(repos=["aur"])
    for name, pkg in remote.items():
        aur_pkg = aurdata.get(name)
        if aur_pkg is None:
            continue

        comparison = vercmp(pkg.version, aur_pkg.version)
        newer = (time_update and aur_pkg.last_modified > pkg.build_date) or comparison < 0
        if not (newer or (enable_downgrade and comparison > 0)):
            continue

        if pkg.should_ignore:
            _warn_ignored(pkg, aur_pkg.version)
            continue
        result.up.append(
            Upgrade(
                name=aur_pkg.name,
                base=aur_pkg.package_base,
                repository="aur",
                local_version=pkg.version,
                remote_version=aur_pkg.version,
                reason=pkg.reason,
            )
        )
    return result