"""Classification of targets and statistics over installed packages."""

from __future__ import annotations

import enum
import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, Sequence, Set, Tuple

from .upgrade import InstalledPackage, Reason


class Mode(enum.Enum):
    """Which package sources an operation considers."""

    ANY = "any"
    AUR = "aur"
    REPO = "repo"


@dataclass(frozen=True)
class Dependency:
    """A dependency or provision by name."""

    name: str
    version: str = ""


@dataclass
class Statistics:
    """Summary of installed packages and cache sizes."""

    total: int = 0
    explicit: int = 0
    total_size: int = 0
    pacman_caches: Dict[str, int] = field(default_factory=dict)
    build_cache: int = 0


class SyncDatabase(Protocol):
    def sync_satisfier_exists(self, name: str) -> bool: ...

    def packages_from_group(self, name: str) -> Sequence[object]: ...


class LocalDatabase(Protocol):
    def local_packages(self) -> Iterable[InstalledPackage]: ...

    def package_provides(self, pkg: InstalledPackage) -> Iterable[Dependency]: ...

    def package_depends(self, pkg: InstalledPackage) -> Iterable[Dependency]: ...

    def package_optional_depends(self, pkg: InstalledPackage) -> Iterable[Dependency]: ...


def split_db_from_name(name: str) -> Tuple[str, str]:
    """Split ``db/name`` into its parts; the database is empty when absent."""
    db_name, sep, pkg_name = name.partition("/")
    if not sep:
        return "", name
    return db_name, pkg_name


def package_slices(
    targets: Iterable[str], mode: Mode, db: SyncDatabase
) -> Tuple[List[str], List[str]]:
    """Separate targets into AUR targets and repository targets."""
    aur_names: List[str] = []
    repo_names: List[str] = []
    for target in targets:
        db_name, name = split_db_from_name(target)
        if db_name == "aur" or mode is Mode.AUR:
            aur_names.append(target)
        elif db_name or mode is Mode.REPO:
            repo_names.append(target)
        elif db.sync_satisfier_exists(name) or db.packages_from_group(name):
            repo_names.append(target)
        else:
            aur_names.append(target)
    return aur_names, repo_names


_REMOVE = 0
_KEEP = 1
_VISITED = 2


def hanging_packages(remove_optional: bool, db: LocalDatabase) -> List[str]:
    """Return packages installed as dependencies that nothing still needs.

    With ``remove_optional`` optional dependencies do not keep a package.
    """
    packages = list(db.local_packages())
    state: Dict[str, int] = {}
    providers: Dict[str, Set[str]] = defaultdict(set)

    for pkg in packages:
        state[pkg.name] = _KEEP if pkg.reason == Reason.EXPLICIT else _REMOVE
        for provided in db.package_provides(pkg):
            providers[provided.name].add(pkg.name)

    changed = True
    while changed:
        changed = False
        for pkg in packages:
            if state[pkg.name] != _KEEP:
                continue
            state[pkg.name] = _VISITED

            deps = list(db.package_depends(pkg))
            if not remove_optional:
                deps.extend(db.package_optional_depends(pkg))

            for dep in deps:
                if dep.name not in state:
                    # the dependency may be satisfied through a provision
                    for provider in providers.get(dep.name, ()):
                        if state[provider] == _REMOVE:
                            state[provider] = _KEEP
                            changed = True
                    continue
                if state[dep.name] == _REMOVE:
                    state[dep.name] = _KEEP
                    changed = True

    return [pkg.name for pkg in packages if state[pkg.name] == _REMOVE]


def folder_size(path: str) -> int:
    """Sum the sizes of a path and everything beneath it; zero if it is missing."""
    try:
        total = os.lstat(path).st_size
    except OSError:
        return 0
    for root, dirs, files in os.walk(path):
        for name in dirs + files:
            try:
                total += os.lstat(os.path.join(root, name)).st_size
            except OSError:
                continue
    return total


def statistics(
    packages: Iterable[InstalledPackage], cache_dirs: Iterable[str], build_dir: str
) -> Statistics:
    """Count installed packages and measure package caches."""
    result = Statistics()
    for pkg in packages:
        result.total += 1
        result.total_size += pkg.installed_size
        if pkg.reason == Reason.EXPLICIT:
            result.explicit += 1
    result.pacman_caches = {path: folder_size(path) for path in cache_dirs}
    result.build_cache = folder_size(build_dir)
    return result