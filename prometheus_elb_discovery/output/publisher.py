"""Atomic publication of the target group document."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import BinaryIO

from ..config import STDOUT_DEST
from ..exceptions import PublishError

logger = logging.getLogger(__name__)

_FILE_MODE = 0o644


def publish(dest: str, data: bytes, stream: BinaryIO | None = None) -> None:
    """Write ``data`` to ``dest`` so readers see either the old or the new file.

    ``"-"`` writes straight to ``stream`` (standard output by default).
    """
    if dest == STDOUT_DEST:
        _write_stream(data, stream if stream is not None else sys.stdout.buffer)
        return
    atomic_write(Path(dest), data)
    logger.info("Wrote %d bytes", len(data), extra={"dest": dest})


def _write_stream(data: bytes, stream: BinaryIO) -> None:
    try:
        stream.write(data)
        stream.flush()
    except OSError as exc:
        raise PublishError(f"Could not write to stdout: {exc}", dest=STDOUT_DEST) from exc


def atomic_write(path: Path, data: bytes) -> None:
    """Write into a temporary sibling of ``path`` and rename it into place."""
    directory = path.parent
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".new", dir=directory)
    except OSError as exc:
        raise PublishError(f"Could not create temporary file in {directory}: {exc}", dest=str(path)) from exc

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, _FILE_MODE)
        os.replace(tmp_name, path)
    except OSError as exc:
        _safe_unlink(tmp_name)
        raise PublishError(f"Could not write {path}: {exc}", dest=str(path)) from exc


def _safe_unlink(name: str) -> None:
    """Best-effort removal of a leftover temporary file."""
    try:
        os.unlink(name)
    except OSError:
        logger.debug("Could not remove temporary file %s", name, exc_info=True)
