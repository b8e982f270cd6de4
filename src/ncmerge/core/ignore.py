# src/ncmerge/core/ignore.py
import logging
from pathlib import Path
from typing import List, Optional

import pathspec

from ncmerge.config import DEFAULT_IGNORE_PATTERNS, IGNORE_FILENAME

logger = logging.getLogger(__name__)


def bootstrap_ncignore(root_dir: Path, output_filename: Optional[str] = None, copy_gitignore: bool = False) -> Path:
    """
    Makes sure `root_dir` has an .ncignore.
    1. If missing, create it from .gitignore (when asked) or the defaults.
    2. If it exists and the output file is not ignored yet, append it.
    """
    ignore_file = root_dir / IGNORE_FILENAME

    if not ignore_file.exists():
        patterns = []
        gitignore_file = root_dir / ".gitignore"
        if copy_gitignore and gitignore_file.exists():
            patterns.extend(gitignore_file.read_text(encoding="utf-8").splitlines())
            logger.info("Copied rules from .gitignore")

        if not patterns:
            patterns = list(DEFAULT_IGNORE_PATTERNS)

        if output_filename and output_filename not in patterns:
            patterns.append(f"\n# Exclude merge output\n{output_filename}")

        ignore_file.write_text("\n".join(patterns) + "\n", encoding="utf-8")
        logger.info("Created %s", ignore_file)
        return ignore_file

    if output_filename:
        spec = load_ignore_spec(ignore_file)
        if not spec.match_file(output_filename):
            logger.info("Adding '%s' to %s", output_filename, ignore_file.name)
            with open(ignore_file, "a", encoding="utf-8") as f:
                f.write(f"\n# Auto-added output file\n{output_filename}\n")

    return ignore_file


def load_ignore_spec(ignore_file: Path, extra_patterns: Optional[List[str]] = None) -> pathspec.PathSpec:
    """
    Loads rules from an .ncignore and builds a PathSpec.
    Extra patterns (like the output filename) are added on top.
    """
    lines: List[str] = []
    if ignore_file.exists():
        lines = ignore_file.read_text(encoding="utf-8").splitlines()
    if extra_patterns:
        lines.extend(extra_patterns)
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def is_path_ignored(rel_path: Path, spec: pathspec.PathSpec, is_directory: bool = False) -> bool:
    path_str = rel_path.as_posix()
    if is_directory and not path_str.endswith("/"):
        path_str += "/"
    return spec.match_file(path_str)
