# src/ncmerge/core/scanner.py
import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Set

import pathspec

from ncmerge.config import NC_EXTENSIONS
from ncmerge.core.ignore import is_path_ignored
from ncmerge.models import NCFile

logger = logging.getLogger(__name__)


def is_binary_file(path: Path) -> bool:
    """
    Reads the first 1024 bytes to check for null bytes.
    Unreadable files are treated as binary.
    """
    try:
        with path.open("rb") as f:
            return b"\0" in f.read(1024)
    except OSError:
        return True


def read_nc_file(path: Path, filename: Optional[str] = None) -> NCFile:
    """Reads one program from disk; the boundary where bytes become text. A leading BOM is dropped."""
    content = path.read_bytes().decode("utf-8-sig", errors="replace")
    # Programs saved on Windows keep their CR otherwise
    content = content.replace("\r\n", "\n")
    return NCFile(filename=filename or path.name, content=content)


class ProgramScanner:
    def __init__(self, root_dir: Path, ignore_spec: pathspec.PathSpec, extensions: Optional[Set[str]] = None):
        self.root_dir = root_dir
        self.ignore_spec = ignore_spec
        self.extensions = {e.lower() for e in (extensions or NC_EXTENSIONS)}
        self.match_all = "*" in self.extensions

    def _wanted(self, path: Path) -> bool:
        return self.match_all or path.suffix.lower() in self.extensions

    def _walk(self) -> Iterator[Path]:
        for root, dirs, files in os.walk(self.root_dir):
            root_path = Path(root)

            # Pruning ignored directories stops os.walk from entering them
            for d in list(dirs):
                if is_path_ignored((root_path / d).relative_to(self.root_dir), self.ignore_spec, is_directory=True):
                    dirs.remove(d)

            for f in files:
                path = root_path / f
                rel_path = path.relative_to(self.root_dir)
                if is_path_ignored(rel_path, self.ignore_spec):
                    continue
                if not self._wanted(path):
                    continue
                if is_binary_file(path):
                    logger.debug("Skipping binary file %s", rel_path.as_posix())
                    continue
                yield path

    def scan(self) -> List[NCFile]:
        """NC programs under root_dir, ordered by relative path."""
        paths = sorted(self._walk(), key=lambda p: p.relative_to(self.root_dir).as_posix())
        return [read_nc_file(p, p.relative_to(self.root_dir).as_posix()) for p in paths]
