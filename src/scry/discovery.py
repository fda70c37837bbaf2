"""Find the source files a scan should read."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Generator, Iterable

from .errors import ScanOperationError

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: frozenset[str] = frozenset({
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
})

DEFAULT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs")

DEFAULT_IGNORE: tuple[str, ...] = tuple(f"**/{name}/**" for name in sorted(DEFAULT_SKIP_DIRS))


def file_extension(path: str | Path) -> str:
    """Text from the last dot of the file name, or "" (``.env`` -> ``.env``)."""
    name = Path(path).name
    index = name.rfind(".")
    return name[index:] if index != -1 else ""


def is_ignored(relative_path: str, patterns: Iterable[str]) -> bool:
    """Match a ``/``-separated relative path against ignore globs.

    A leading ``**/`` also matches at the root, so ``**/dist/**`` ignores
    ``dist/app.js`` as well as ``packages/web/dist/app.js``.
    """
    for pattern in patterns:
        if fnmatch.fnmatch(relative_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatch(relative_path, pattern[3:]):
            return True
    return False


def walk_source_files(
    root: str | Path,
    extensions: Iterable[str],
    ignore: Iterable[str] = (),
    exclude_dirs: set[str] | None = None,
) -> Generator[Path, None, None]:
    """Walk ``root`` yielding files with a supported extension that no ignore glob matches."""
    root = Path(root)
    exts = set(extensions)
    patterns = list(ignore)
    skip = DEFAULT_SKIP_DIRS | exclude_dirs if exclude_dirs else DEFAULT_SKIP_DIRS

    for current, dirs, files in os.walk(root):
        dirs[:] = [d for d in dirs if d not in skip]
        for fname in files:
            path = Path(current) / fname
            if file_extension(fname) not in exts:
                continue
            relative = path.relative_to(root).as_posix()
            if is_ignored(relative, patterns):
                continue
            yield path


def discover_files(
    path: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ignore: Iterable[str] = (),
) -> list[str]:
    """Resolve ``path`` to the sorted list of absolute file paths to scan.

    Raises:
        ScanOperationError: the path does not exist (even with a supported
            extension appended) or is a file with an unsupported extension.
    """
    extensions = list(extensions)
    target = Path(path)

    if not target.exists():
        for ext in extensions:
            candidate = Path(f"{path}{ext}")
            if candidate.is_file():
                logger.debug(f"Resolved {path} to {candidate}")
                return [str(candidate.resolve())]
        raise ScanOperationError("Path not found", context={"path": str(path)})

    if target.is_file():
        ext = file_extension(target)
        if ext not in extensions:
            raise ScanOperationError(
                f"File extension {ext or '(none)'} is not supported. "
                f"Supported extensions: {', '.join(extensions)}",
                context={"path": str(path)},
            )
        return [str(target.resolve())]

    files = sorted(str(p.resolve()) for p in walk_source_files(target, extensions, ignore))
    logger.info(f"Discovered {len(files)} files under {target}")
    return files
