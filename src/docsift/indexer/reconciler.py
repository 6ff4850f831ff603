from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import DirectoryUnreadable
from ..models import DocFormat, Document
from ..paths import matches_ignore_pattern

logger = logging.getLogger(__name__)

@dataclass
class Reconciler:
    """Lists the supported documents currently present under the source root."""
    root: Path
    ignore: list[str]

    def is_candidate(self, rel_path: str) -> bool:
        return DocFormat.from_path(rel_path) is not None and not matches_ignore_pattern(rel_path, self.ignore)

    def scan_documents(self) -> list[tuple[Path, Document]]:
        """Return (absolute path, Document) pairs sorted by doc_id.

        Raises DirectoryUnreadable if the root itself cannot be listed.
        Unreadable subdirectories and files that vanish mid-scan are skipped.
        """
        root = Path(self.root)
        try:
            if not root.is_dir():
                raise DirectoryUnreadable(root, "not a directory")
            os.listdir(root)
        except OSError as e:
            raise DirectoryUnreadable(root, str(e)) from e

        def _on_error(err: OSError) -> None:
            logger.warning(f"Skipping unreadable directory {err.filename}: {err.strerror}")

        found: list[tuple[Path, Document]] = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames.sort()
            for name in filenames:
                p = Path(dirpath) / name
                rel = p.relative_to(root).as_posix()
                fmt = DocFormat.from_path(rel)
                if fmt is None or matches_ignore_pattern(rel, self.ignore):
                    continue
                try:
                    st = p.stat()
                except OSError as e:
                    logger.debug(f"File disappeared during scan: {rel} ({e})")
                    continue
                found.append((p, Document(doc_id=rel, size_bytes=int(st.st_size), format=fmt, mtime=int(st.st_mtime))))

        found.sort(key=lambda item: item[1].doc_id)
        return found
