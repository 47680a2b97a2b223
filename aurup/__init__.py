"""Upgrade detection, VCS commit tracking, target queries and voting for AUR packages."""

__version__ = "12.0.0"

__all__ = ["query", "upgrade", "vcs", "version", "vote"]