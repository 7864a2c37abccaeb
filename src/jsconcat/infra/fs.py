from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation and the raw read primitives used
by the tree builder. Acts as an abstraction over the 'os' module so map
sources use one separator convention on Windows and Unix-like systems.
"""

import glob
import os
from typing import List, Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "jsconcat"
UNIX_APP_DIR_NAME = ".jsconcat"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/jsconcat
    - Linux/Mac: ~/.jsconcat

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.normpath(os.path.abspath(p))


def to_posix(path: str) -> str:
    """Convert platform separators to forward slashes."""
    return path.replace("\\", "/")


def relative_to(path: str, start_dir: str) -> str:
    """
    Express `path` relative to `start_dir` using forward slashes.

    Falls back to the absolute path when no relative form exists
    (e.g. different drives on Windows).
    """
    try:
        rel = os.path.relpath(path, start_dir)
    except ValueError:
        rel = path
    return to_posix(rel)


def display_path(path: str, root_dir: str) -> str:
    """Shorten a path for human-readable messages."""
    try:
        return os.path.relpath(path, root_dir)
    except ValueError:
        return path

# -----------------------------------------------------------------------------
# READ PRIMITIVES
# -----------------------------------------------------------------------------

def is_file(path: str) -> bool:
    return os.path.isfile(path)


def read_text(path: str) -> str:
    """
    Read a whole file verbatim.

    Line endings are preserved (`newline=""`) and undecodable bytes are
    replaced instead of aborting the run. OSError propagates to the caller.
    """
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def read_optional_text(path: str) -> Optional[str]:
    """Read a file, returning None when it is missing or unreadable."""
    try:
        return read_text(path)
    except OSError:
        return None


def expand_pattern(pattern: str, base_dir: str) -> List[str]:
    """
    Expand a wildcard pattern relative to `base_dir`.

    Results keep the order of the underlying directory listing.

    Returns:
        List[str]: Absolute, normalized paths of matching files.
    """
    full = os.path.join(base_dir, pattern)
    return [
        os.path.normpath(os.path.abspath(p))
        for p in glob.glob(full, recursive=True)
        if os.path.isfile(p)
    ]

# -----------------------------------------------------------------------------
# FILESYSTEM WRITE API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def write_text(path: str, content: str) -> None:
    """Write content as UTF-8 without newline translation."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
