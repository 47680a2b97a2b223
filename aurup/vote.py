"""Voting on AUR packages."""

from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from .upgrade import AURPackage


class NoCredentialsError(Exception):
    """No AUR credentials are available for voting."""


class AURVoteError(Exception):
    """Voting on a package failed."""

    def __init__(self, pkg_name: str, inner: BaseException) -> None:
        super().__init__(f"Unable to handle package vote for: {pkg_name}. err: {inner}")
        self.pkg_name = pkg_name
        self.inner = inner


class AURClient(Protocol):
    def get(self, names: Sequence[str]) -> List[AURPackage]: ...


class VoteClient(Protocol):
    def vote(self, package_base: str) -> None: ...

    def unvote(self, package_base: str) -> None: ...


def handle_package_vote(
    targets: Iterable[str], aur_client: AURClient, vote_client: VoteClient, upvote: bool
) -> None:
    """Vote for, or withdraw the vote from, the package base of every target."""
    infos = aur_client.get(list(targets))
    if not infos:
        print(" there is nothing to do")
        return

    for info in infos:
        action = vote_client.vote if upvote else vote_client.unvote
        try:
            action(info.package_base)
        except NoCredentialsError as exc:
            raise NoCredentialsError(
                f"{exc}: please set AUR_USERNAME and AUR_PASSWORD environment variables for voting"
            ) from exc
        except Exception as exc:
            raise AURVoteError(info.name, exc) from exc