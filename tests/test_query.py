import pytest

from aurup.query import (
    Dependency,
    Mode,
    folder_size,
    hanging_packages,
    package_slices,
    split_db_from_name,
    statistics,
)
from aurup.upgrade import InstalledPackage, Reason


class FakeDb:
    def __init__(self, packages=(), satisfiers=(), groups=None, provides=None, depends=None, optdepends=None):
        self.packages = list(packages)
        self.satisfiers = set(satisfiers)
        self.groups = groups or {}
        self.provides = provides or {}
        self.depends = depends or {}
        self.optdepends = optdepends or {}

    def sync_satisfier_exists(self, name):
        return name in self.satisfiers

    def packages_from_group(self, name):
        return self.groups.get(name, [])

    def local_packages(self):
        return self.packages

    def package_provides(self, pkg):
        return [Dependency(n) for n in self.provides.get(pkg.name, [])]

    def package_depends(self, pkg):
        return [Dependency(n) for n in self.depends.get(pkg.name, [])]

    def package_optional_depends(self, pkg):
        return [Dependency(n) for n in self.optdepends.get(pkg.name, [])]


@pytest.mark.parametrize(
    "raw, expected",
    [("core/linux", ("core", "linux")), ("linux", ("", "linux")), ("a/b/c", ("a", "b/c"))],
)
def test_split_db_from_name(raw, expected):
    assert split_db_from_name(raw) == expected


def test_package_slices_any_mode():
    db = FakeDb(satisfiers={"linux"}, groups={"base-devel": ["gcc"]})
    aur, repo = package_slices(
        ["linux", "jellyfin", "aur/linux", "extra/jellyfin", "base-devel"], Mode.ANY, db
    )
    assert aur == ["jellyfin", "aur/linux"]
    assert repo == ["linux", "extra/jellyfin", "base-devel"]


def test_package_slices_aur_mode_sends_everything_to_aur():
    db = FakeDb(satisfiers={"linux"})
    targets = ["linux", "core/linux"]
    assert package_slices(targets, Mode.AUR, db) == (targets, [])


def test_package_slices_repo_mode_keeps_aur_prefix():
    db = FakeDb()
    aur, repo = package_slices(["aur/foo", "foo"], Mode.REPO, db)
    assert aur == ["aur/foo"]
    assert repo == ["foo"]


def _graph_db():
    packages = [
        InstalledPackage("app", reason=Reason.EXPLICIT),
        InstalledPackage("lib", reason=Reason.DEPEND),
        InstalledPackage("impl", reason=Reason.DEPEND),
        InstalledPackage("extra", reason=Reason.DEPEND),
        InstalledPackage("orphan", reason=Reason.DEPEND),
    ]
    return FakeDb(
        packages=packages,
        depends={"app": ["lib", "virtual"]},
        provides={"impl": ["virtual"]},
        optdepends={"app": ["extra"]},
    )


def test_hanging_packages_keeps_optional_deps():
    assert hanging_packages(False, _graph_db()) == ["orphan"]


def test_hanging_packages_remove_optional():
    assert hanging_packages(True, _graph_db()) == ["extra", "orphan"]


def test_hanging_packages_transitive():
    db = FakeDb(
        packages=[
            InstalledPackage("c", reason=Reason.DEPEND),
            InstalledPackage("b", reason=Reason.DEPEND),
            InstalledPackage("a", reason=Reason.EXPLICIT),
        ],
        depends={"a": ["b"], "b": ["c"]},
    )
    assert hanging_packages(True, db) == []


def test_folder_size_of_file(tmp_path):
    target = tmp_path / "blob"
    target.write_bytes(b"x" * 123)
    assert folder_size(str(target)) == 123


def test_folder_size_covers_nested_files(tmp_path):
    nested = tmp_path / "sub"
    nested.mkdir()
    (nested / "one").write_bytes(b"a" * 300)
    (tmp_path / "two").write_bytes(b"b" * 200)
    assert folder_size(str(tmp_path)) >= 500


def test_folder_size_missing_path(tmp_path):
    assert folder_size(str(tmp_path / "missing")) == 0


def test_statistics(tmp_path):
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "pkg").write_bytes(b"z" * 50)
    build = tmp_path / "build"
    build.mkdir()
    packages = [
        InstalledPackage("a", reason=Reason.EXPLICIT, installed_size=10),
        InstalledPackage("b", reason=Reason.DEPEND, installed_size=20),
        InstalledPackage("c", reason=Reason.EXPLICIT, installed_size=30),
    ]
    stats = statistics(packages, [str(cache)], str(build))
    assert stats.total == 3
    assert stats.explicit == 2
    assert stats.total_size == 60
    assert stats.pacman_caches == {str(cache): folder_size(str(cache))}
    assert stats.build_cache == folder_size(str(build))