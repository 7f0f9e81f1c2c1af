"""
Filesystem helper used by the tabular loader and writer.

**Conceptual**: The loader and writer never touch the filesystem directly.
They go through these small functions (list a directory, read/write text,
ensure a directory exists, lock a file by renaming it) so that all path
handling and I/O error behavior lives in one place.

**Error behavior**: Plain I/O failures (missing file, permission denied) are
raised as the built-in OSError subclasses and left to propagate. Only the lock
helpers translate failures into FileLockError, because a failed lock is a
tabfile-level condition ("someone else has this file"), not just an I/O error.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from tabfile.data.errors import FileLockError

logger = logging.getLogger(__name__)


DEFAULT_LOCK_PREFIX = "LOCKED_"


def is_dir(path: Path | str) -> bool:
    """Return True if ``path`` exists and is a directory."""
    return Path(path).is_dir()


def get_ext(path: Path | str) -> str:
    """
    Return the lower-cased extension of ``path`` without the leading dot.

    Returns "" when the path has no extension.

    Example:
        >>> get_ext("data/Report.XLSX")
        'xlsx'
    """
    return Path(path).suffix.lstrip(".").lower()


def list_files(
    directory: Path | str,
    extensions: Iterable[str] | None = None,
) -> list[Path]:
    """
    List the regular files directly inside ``directory``.

    **Functionally**:
      - Non-recursive: subdirectories are ignored.
      - Optional filter on extension (case-insensitive, without the dot).
      - Sorted by file name so batch loads run in a stable, repeatable order.

    Args:
        directory: Directory to scan.
        extensions: Extensions to keep (e.g. ["csv", "xlsx"]). None keeps all.

    Returns:
        List of file paths, sorted by name.

    Raises:
        FileNotFoundError: If ``directory`` doesn't exist.
        NotADirectoryError: If ``directory`` is a file.
    """
    directory = Path(directory)
    wanted = {ext.lower().lstrip(".") for ext in extensions} if extensions is not None else None

    files = []
    for entry in directory.iterdir():
        if not entry.is_file():
            continue
        if wanted is not None and get_ext(entry) not in wanted:
            continue
        files.append(entry)

    return sorted(files, key=lambda p: p.name)


def read_text(path: Path | str, encoding: str = "utf-8") -> str:
    """
    Read a whole text file.

    Newlines are passed through untranslated so the CSV decoder sees exactly
    what is on disk (including newlines embedded in quoted cells).
    """
    with open(path, "r", encoding=encoding, newline="") as f:
        return f.read()


def ensure_directory(directory: Path | str) -> Path:
    """
    Make sure ``directory`` exists, creating it (and parents) if necessary.

    Raises:
        FileExistsError: If ``directory`` exists but is a file.
        OSError: If the directory can't be created (permissions, etc.).
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_text(path: Path | str, content: str, encoding: str = "utf-8") -> Path:
    """
    Write ``content`` to ``path``, replacing any existing file.

    The parent directory must already exist (see ensure_directory).

    Returns:
        The path written, as a Path.
    """
    path = Path(path)
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(content)
    logger.debug("Wrote %d characters to %s", len(content), path)
    return path


def _check_prefix(prefix: str) -> None:
    if not prefix or os.sep in prefix or (os.altsep and os.altsep in prefix):
        raise ValueError(f"Lock prefix must be a non-empty file name fragment, got: {prefix!r}")


def lock_file(path: Path | str, prefix: str = DEFAULT_LOCK_PREFIX) -> Path:
    """
    Take an advisory lock on a file by renaming it.

    **Conceptual**: ``<dir>/<name>`` is renamed to ``<dir>/<prefix><name>``.
    Other processes that follow the same convention will no longer find the
    file under its original name. The extension is untouched, so the locked
    file is still dispatched by its real format.

    This is a best-effort guard: the existence check and the rename are two
    separate steps, so it is not atomic against external writers.

    Args:
        path: File to lock.
        prefix: Prefix added to the file name (default "LOCKED_").

    Returns:
        Path of the locked (renamed) file.

    Raises:
        FileLockError: If the file doesn't exist, the locked name is already
                       taken, or the rename fails.
        ValueError: If ``prefix`` is empty or contains a path separator.

    Example:
        >>> lock_file("inbox/orders.csv")
        PosixPath('inbox/LOCKED_orders.csv')
    """
    _check_prefix(prefix)
    path = Path(path)
    locked = path.with_name(prefix + path.name)

    if not path.is_file():
        raise FileLockError(f"Unable to lock \"{path}\": file does not exist.")
    if locked.exists():
        raise FileLockError(f"Unable to lock \"{path}\": \"{locked.name}\" already exists.")

    try:
        path.rename(locked)
    except OSError as e:
        raise FileLockError(f"Unable to lock \"{path}\".", cause=e) from e

    logger.debug("Locked %s as %s", path, locked.name)
    return locked


def unlock_file(path: Path | str, prefix: str = DEFAULT_LOCK_PREFIX) -> Path:
    """
    Release a lock taken by lock_file by stripping the prefix again.

    Args:
        path: The locked file (its name must start with ``prefix``).
        prefix: Prefix used when locking (default "LOCKED_").

    Returns:
        Path of the file under its original name.

    Raises:
        FileLockError: If ``path`` is not a locked name, doesn't exist, the
                       original name is taken, or the rename fails.
    """
    _check_prefix(prefix)
    path = Path(path)

    if not path.name.startswith(prefix):
        raise FileLockError(f"Unable to unlock \"{path}\": not a locked file name.")

    original = path.with_name(path.name[len(prefix):])
    if not path.is_file():
        raise FileLockError(f"Unable to unlock \"{path}\": file does not exist.")
    if original.exists():
        raise FileLockError(f"Unable to unlock \"{path}\": \"{original.name}\" already exists.")

    try:
        path.rename(original)
    except OSError as e:
        raise FileLockError(f"Unable to unlock \"{path}\".", cause=e) from e

    logger.debug("Unlocked %s", original)
    return original
