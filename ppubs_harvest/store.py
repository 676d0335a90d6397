"""Filesystem artifact store.

An artifact's presence at its deterministic path is its completion record;
there is no manifest. Writes go through a temp file and ``Path.replace`` so a
present file is always a complete one.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .models import ArtifactKind

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".part"


class ArtifactStore:
    """Directory of ``{identifier}{suffix}`` files."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, identifier: str, kind: ArtifactKind) -> Path:
        return self.root / f"{identifier}{kind.suffix}"

    def exists(self, identifier: str, kind: ArtifactKind) -> bool:
        return self.path_for(identifier, kind).is_file()

    def write_atomic(self, identifier: str, kind: ArtifactKind, data: bytes) -> Path:
        """Write ``data`` to the artifact path via tmp-file rename.

        Raises:
            OSError: If the temp file cannot be written or renamed. The temp
                file is removed and nothing is left at the artifact path.
        """
        path = self.path_for(identifier, kind)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + TMP_SUFFIX)
        try:
            with tmp.open("wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path
