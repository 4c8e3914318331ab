"""Reading identity documents from a registry directory.

The directory is treated as read-only and scanned non-recursively.  A
missing directory and unreadable documents are both recoverable: they are
logged and reported in the :class:`DocumentScan`, never raised.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentScan:
    """Result of scanning one registry directory.

    Attributes
    ----------
    directory:
        The directory that was scanned.
    found:
        ``False`` when the directory did not exist or could not be listed.
    documents:
        ``(filename, parsed JSON)`` pairs in read order.
    skipped:
        Filenames that matched an extension but could not be read or parsed.
    """

    directory: Path
    found: bool
    documents: tuple[tuple[str, object], ...] = field(default_factory=tuple)
    skipped: tuple[str, ...] = field(default_factory=tuple)


def list_documents(
    directory: Path,
    extensions: Iterable[str] = (".json",),
    ordered: bool = True,
) -> list[Path]:
    """Return the files in *directory* carrying a recognised extension.

    Raises
    ------
    OSError
        If the directory cannot be listed.
    """
    wanted = {ext.lower() for ext in extensions}
    paths = [
        path
        for path in directory.iterdir()
        if path.suffix.lower() in wanted and path.is_file()
    ]
    if ordered:
        paths.sort(key=lambda p: p.name)
    return paths


def scan_directory(
    directory: str | Path,
    extensions: Iterable[str] = (".json",),
    ordered: bool = True,
) -> DocumentScan:
    """Read and parse every identity document in *directory*.

    A document that cannot be read or is not valid JSON is skipped; the
    remaining documents are still returned.

    Parameters
    ----------
    directory:
        Directory holding one JSON document per identity.
    extensions:
        Recognised file extensions, including the leading dot.
    ordered:
        Sort documents by filename.  When ``False`` the platform's directory
        listing order is used.
    """
    resolved = Path(directory)
    if not resolved.is_dir():
        logger.warning("Registry not found at %s", resolved)
        return DocumentScan(directory=resolved, found=False)

    try:
        paths = list_documents(resolved, extensions, ordered)
    except OSError as exc:
        logger.warning("Could not list registry directory %s: %s", resolved, exc)
        return DocumentScan(directory=resolved, found=False)

    documents: list[tuple[str, object]] = []
    skipped: list[str] = []
    for path in paths:
        try:
            with path.open(encoding="utf-8") as fh:
                documents.append((path.name, json.load(fh)))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load %s: %s", path.name, exc)
            skipped.append(path.name)

    return DocumentScan(
        directory=resolved,
        found=True,
        documents=tuple(documents),
        skipped=tuple(skipped),
    )
