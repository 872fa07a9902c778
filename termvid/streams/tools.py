"""Locating the external ffmpeg tools."""

from __future__ import annotations

import os
import shutil

from ..errors import SourceUnavailable


def find_tool(name: str) -> str | None:
    """Find an external tool.

    ``TERMVID_<NAME>`` (e.g. ``TERMVID_FFMPEG``) overrides the PATH lookup.

    :param name: Executable name, e.g. ``"ffmpeg"``
    :return: Full path, or None if not found
    """
    override = os.environ.get(f"TERMVID_{name.upper()}")
    if override:
        return override if os.path.isfile(override) else shutil.which(override)
    return shutil.which(name)


def require_tool(name: str) -> str:
    """Like :func:`find_tool` but raise if the tool is missing.

    :raises SourceUnavailable: if the tool cannot be located
    """
    path = find_tool(name)
    if path is None:
        raise SourceUnavailable(f"{name} not found; install ffmpeg and make sure it is on PATH")
    return path


__all__ = ["find_tool", "require_tool"]
