"""Tracking of the last known commit of git sources used by VCS packages."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Container, Dict, Iterable, List, Optional, Sequence, Tuple

DEFAULT_TIMEOUT = 15.0

log = logging.getLogger(__name__)

GitRunner = Callable[..., str]
"""Called as ``runner(args, timeout=seconds)`` with git arguments; returns stdout.

A runner signals failure by raising :class:`GitCommandError`.
"""


@dataclass
class OriginInfo:
    """Last seen commit of one origin URL."""

    protocols: List[str] = field(default_factory=list)
    branch: str = ""
    sha: str = ""


OriginInfoByURL = Dict[str, OriginInfo]


class GitCommandError(Exception):
    """A git command failed."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


def parse_source(source: str) -> Tuple[str, str, Optional[List[str]]]:
    """Return the git URL, branch and protocols of a source entry.

    Sources that are not git, or that pin a tag or commit, give ``("", "", None)``.
    """
    source = source.split("::")[-1]
    scheme_split = source.split("://", 1)
    if len(scheme_split) != 2:
        return "", "", None

    protocols = scheme_split[0].split("+", 1)
    is_git = "git" in protocols
    protocols = protocols[-1:]
    if not is_git:
        return "", "", None

    url = ""
    branch = ""
    fragment_split = scheme_split[1].split("#", 1)
    if len(fragment_split) == 2:
        key_value = fragment_split[1].split("=", 1)
        if key_value[0] != "branch":
            # a #commit= or #tag= reference points at a fixed revision
            return "", "", None
        if len(key_value) == 2:
            url = fragment_split[0]
            branch = key_value[1]
    else:
        url = fragment_split[0]
        branch = "HEAD"

    url = url.split("?")[0]
    branch = branch.split("?")[0]
    return url, branch, protocols


def _info_from_json(raw: dict) -> OriginInfo:
    return OriginInfo(
        protocols=list(raw.get("protocols") or []),
        branch=raw.get("branch", "") or "",
        sha=raw.get("sha", "") or "",
    )


class InfoStore:
    """Per-package record of origin URLs and their last known commit, kept in a JSON file."""

    def __init__(self, file_path: str, runner: GitRunner) -> None:
        self.file_path = file_path
        self.runner = runner
        self.origins_by_package: Dict[str, OriginInfoByURL] = {}
        self._lock = threading.Lock()

    def _get_commit(self, url: str, branch: str, protocols: Sequence[str]) -> str:
        if not protocols:
            return ""
        protocol = protocols[-1]
        args = ["ls-remote", f"{protocol}://{url}", branch]
        try:
            stdout = self.runner(args, timeout=DEFAULT_TIMEOUT)
        except GitCommandError as exc:
            command = "git " + " ".join(args)
            detail = exc.stderr if exc.exit_code == 128 else str(exc)
            log.warning("devel check for package failed: '%s' encountered an error: %s", command, detail)
            return ""

        fields = stdout.split()
        if len(fields) < 2:
            return ""
        return fields[0]

    def to_upgrade(self, pkg_name: str) -> bool:
        """Tell whether any tracked origin of the package has a new commit."""
        infos = self.origins_by_package.get(pkg_name)
        if infos is None:
            return False
        return self.needs_update(infos)

    def needs_update(self, infos: OriginInfoByURL) -> bool:
        """Check every origin concurrently; true as soon as one has moved on."""
        if not infos:
            return False
        pool = ThreadPoolExecutor(max_workers=len(infos))
        try:
            futures = {
                pool.submit(self._get_commit, url, info.branch, info.protocols): info
                for url, info in infos.items()
            }
            for future in as_completed(futures):
                commit = future.result()
                if commit and commit != futures[future].sha:
                    return True
            return False
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def update(self, pkg_name: str, sources: Iterable[str]) -> None:
        """Record the current commit of each git source of a package."""
        info: OriginInfoByURL = {}

        def check_source(source: str) -> None:
            url, branch, protocols = parse_source(source)
            if not url or not branch:
                return
            commit = self._get_commit(url, branch, protocols or [])
            if not commit:
                return
            with self._lock:
                info[url] = OriginInfo(list(protocols or []), branch, commit)
                self.origins_by_package[pkg_name] = info
                log.debug("Found git repo: %s", url)
                try:
                    self.save()
                except OSError as exc:
                    print(exc, file=sys.stderr)

        sources = list(sources)
        if not sources:
            return
        with ThreadPoolExecutor(max_workers=len(sources)) as pool:
            for future in [pool.submit(check_source, source) for source in sources]:
                future.result()

    def save(self) -> None:
        """Write the store to its file as tab-indented JSON."""
        data = {
            pkg: {url: asdict(by_url[url]) for url in sorted(by_url)}
            for pkg, by_url in sorted(self.origins_by_package.items())
        }
        text = json.dumps(data, indent="\t")
        with open(self.file_path, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())

    def load(self) -> None:
        """Merge the contents of the store file, if it exists, into memory."""
        try:
            handle = open(self.file_path, encoding="utf-8")
        except FileNotFoundError:
            return
        except OSError as exc:
            raise OSError(f"failed to open vcs file '{self.file_path}': {exc}") from exc

        with handle:
            try:
                raw = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"failed to read vcs '{self.file_path}': {exc}") from exc

        if raw is None:
            return
        if not isinstance(raw, dict):
            raise ValueError(f"failed to read vcs '{self.file_path}': expected an object")
        for pkg, by_url in raw.items():
            self.origins_by_package[pkg] = {
                url: _info_from_json(info) for url, info in (by_url or {}).items()
            }

    def remove_packages(self, pkgs: Iterable[str]) -> None:
        """Forget the given packages and save if anything changed."""
        updated = False
        for pkg_name in pkgs:
            if self.origins_by_package.pop(pkg_name, None) is not None:
                updated = True
        if updated:
            try:
                self.save()
            except OSError as exc:
                print(exc, file=sys.stderr)

    def clean_orphans(self, pkgs: Container[str]) -> None:
        """Forget every tracked package that is not among the installed ones."""
        missing = [name for name in self.origins_by_package if name not in pkgs]
        for name in missing:
            log.debug("removing orphaned vcs package: %s", name)
        self.remove_packages(missing)


class MockStore:
    """In-memory store whose upgrade answers are fixed in advance.

    It leaves its tracked origins untouched and records every call it gets
    in :attr:`calls` as ``(method, *arguments)`` tuples.
    """

    def __init__(
        self,
        origins_by_package: Optional[Dict[str, OriginInfoByURL]] = None,
        to_upgrade_return: Optional[Iterable[str]] = None,
    ) -> None:
        self.origins_by_package = dict(origins_by_package or {})
        self.to_upgrade_return = list(to_upgrade_return or [])
        self.calls: List[Tuple[Any, ...]] = []

    def to_upgrade(self, pkg_name: str) -> bool:
        return pkg_name in self.to_upgrade_return

    def update(self, pkg_name: str, sources: Iterable[str]) -> None:
        self.calls.append(("update", pkg_name, list(sources)))

    def save(self) -> None:
        self.calls.append(("save",))

    def load(self) -> None:
        self.calls.append(("load",))

    def remove_packages(self, pkgs: Iterable[str]) -> None:
        self.calls.append(("remove_packages", list(pkgs)))

    def clean_orphans(self, pkgs: Container[str]) -> None:
        self.calls.append(("clean_orphans", pkgs))