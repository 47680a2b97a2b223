# aurup

`aurup` is a library of building blocks for tools that manage packages from
the AUR. It works out which installed foreign packages have newer versions,
keeps track of the last commit of the git sources behind VCS (`-git`)
packages, splits targets between the repositories and the AUR, finds
orphaned dependencies, and handles package votes.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `aurup.version`

- `vercmp(a, b)` compares two pacman-style versions
  (`[epoch:]version[-release]`) and returns a negative number, zero or a
  positive number.
- `version_diff(old, new)` returns both versions with the part where they
  start to differ coloured with ANSI escapes: red in the old version, green
  in the new one.

### `aurup.vcs`

- `parse_source(source)` reads a PKGBUILD source entry and returns
  `(url, branch, protocols)`. Entries that are not git sources, or that pin a
  `#tag=` or `#commit=`, give `("", "", None)`. A source without a branch
  fragment tracks `HEAD`.
- `OriginInfo` holds the protocols, branch and last seen commit (`sha`) of one
  origin URL.
- `InfoStore(file_path, runner)` is a per-package record of origins, kept in
  a JSON file. It does not run git itself: `runner` is a callable invoked as
  `runner(args, timeout=seconds)` with `git` arguments (`ls-remote ...`) that
  returns standard output and raises `GitCommandError` on failure.
  - `update(pkg_name, sources)` looks up the current commit of every git
    source concurrently, records it and saves the file.
  - `to_upgrade(pkg_name)` and `needs_update(infos)` tell whether any tracked
    origin has moved to a new commit.
  - `save()` writes the store as tab-indented JSON; `load()` merges the file
    into memory and does nothing if it does not exist.
  - `remove_packages(pkgs)` forgets packages and saves if anything changed;
    `clean_orphans(pkgs)` forgets every package not in `pkgs`.
- `MockStore(origins_by_package, to_upgrade_return)` has the same methods,
  answers `to_upgrade` from a fixed list and records every other call in
  `calls`.

### `aurup.upgrade`

- `Reason`, `InstalledPackage`, `AURPackage` and `Upgrade` describe installed
  packages, AUR entries and pending upgrades.
- `up_aur(remote, aurdata, time_update, enable_downgrade)` collects the
  installed packages for which the AUR has a newer version (or an older one
  when downgrades are enabled, or a later modification time when
  `time_update` is set).
- `up_devel(remote, aurdata, store)` collects development packages whose
  store reports new commits; their remote version is `latest-commit`.
- Packages marked `should_ignore` are left out with a logged warning.
- `UpSlice` holds the upgrades (`up`), the repositories that order them
  (`repos`) and any dependencies pulled in (`pulled_deps`). `sort()` orders by
  repository, known repositories first, then by name; `render()` returns the
  numbered upgrade table and `render_deps()` the table of pulled dependencies.
- `stylized_name_with_repository(upgrade)` returns `repository/name` with
  terminal styling.

### `aurup.query`

- `split_db_from_name(name)` splits `db/name`.
- `package_slices(targets, mode, db)` separates targets into AUR names and
  repository names according to `Mode` (`ANY`, `AUR`, `REPO`) and what the
  sync database can satisfy.
- `hanging_packages(remove_optional, db)` returns packages installed as
  dependencies that no explicitly installed package still needs, following
  provisions (`Dependency`).
- `folder_size(path)` sums the sizes beneath a path.
- `statistics(packages, cache_dirs, build_dir)` returns a `Statistics` with
  package counts, total installed size and cache sizes.

### `aurup.vote`

- `handle_package_vote(targets, aur_client, vote_client, upvote)` looks the
  targets up through `aur_client.get(names)` and calls `vote_client.vote` or
  `vote_client.unvote` with each package base. It prints
  ` there is nothing to do` when nothing is found, raises
  `NoCredentialsError` asking for `AUR_USERNAME` and `AUR_PASSWORD` when the
  vote client has no credentials, and wraps any other failure in
  `AURVoteError`.

## Example

```python
from aurup.upgrade import AURPackage, InstalledPackage, up_aur
from aurup.vcs import parse_source
from aurup.version import vercmp

parse_source("git+https://github.com/neovim/neovim.git")
# ('github.com/neovim/neovim.git', 'HEAD', ['https'])

vercmp("1.2.9-1", "1.2.10-1")  # -1

remote = {"hello": InstalledPackage(name="hello", version="2.0.0")}
aurdata = {"hello": AURPackage(name="hello", version="2.1.0")}
up_aur(remote, aurdata, time_update=False, enable_downgrade=False).up
# [Upgrade(name='hello', repository='aur', local_version='2.0.0', remote_version='2.1.0', ...)]
```

## What it does not do

`aurup` is a library only: it has no command-line program and installs,
builds or removes nothing. It talks to no package database, AUR web service
or voting endpoint of its own, and runs no git commands; the caller supplies
those as objects (the database, `aur_client`, `vote_client`) and as the git
`runner` of `InfoStore`. Messages are reported through the standard `logging`
module.