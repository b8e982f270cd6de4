# src/ncmerge/core/merger.py
"""
Merges an ordered list of NC programs into a single program.

Each trimmed input line is run through LINE_RULES in order; the first rule
that returns an action decides what happens to the line.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from ncmerge.config import BANNER_RULE, PREVIEW_HEADER_LINES, PREVIEW_LINES_PER_FILE
from ncmerge.core.remapper import find_conflicts, remap_multiple_files
from ncmerge.core.validator import get_stats, is_valid_nc_file
from ncmerge.errors import EmptyInputError, InvalidFileError
from ncmerge.models import (
    FileStats,
    MergeOptions,
    MergeResult,
    MergeStats,
    NCFile,
    PreviewResult,
    ToolConflicts,
    ToolMapping,
)

logger = logging.getLogger(__name__)

PROGRAM_NUMBER_RE = re.compile(r"^O\d+", re.IGNORECASE | re.ASCII)
PROGRAM_END_RE = re.compile(r"^M(?:30|02)\b", re.IGNORECASE | re.ASCII)
PROGRAM_STOP_RE = re.compile(r"^M00\b", re.IGNORECASE | re.ASCII)


class LineAction(Enum):
    SKIP = "skip"
    EMIT = "emit"
    EMIT_WITH_COMMENT = "emit_with_comment"


@dataclass(frozen=True)
class LineContext:
    """Where a line sits in the merge: which file, which line, what options."""
    line: str
    line_index: int
    file_index: int
    file_count: int
    filename: str
    options: MergeOptions
    output_empty: bool

    @property
    def is_first_file(self) -> bool:
        return self.file_index == 0

    @property
    def is_last_file(self) -> bool:
        return self.file_index == self.file_count - 1


def _leading_blank(ctx: LineContext) -> Optional[LineAction]:
    if ctx.output_empty and not ctx.line:
        return LineAction.SKIP
    return None


def _percent_marker(ctx: LineContext) -> Optional[LineAction]:
    if ctx.line != "%":
        return None
    if ctx.options.preserve_headers and ctx.is_first_file and ctx.line_index == 0:
        return LineAction.EMIT
    return LineAction.SKIP


def _program_number(ctx: LineContext) -> Optional[LineAction]:
    if not PROGRAM_NUMBER_RE.match(ctx.line):
        return None
    if ctx.options.preserve_headers and ctx.is_first_file:
        return LineAction.EMIT
    return LineAction.SKIP


def _program_end(ctx: LineContext) -> Optional[LineAction]:
    if not PROGRAM_END_RE.match(ctx.line):
        return None
    return LineAction.EMIT if ctx.is_last_file else LineAction.SKIP


def _program_stop(ctx: LineContext) -> Optional[LineAction]:
    if not PROGRAM_STOP_RE.match(ctx.line):
        return None
    return LineAction.EMIT_WITH_COMMENT if ctx.options.add_comments else LineAction.EMIT


def _default(ctx: LineContext) -> LineAction:
    return LineAction.EMIT if ctx.line else LineAction.SKIP


LINE_RULES: List[Callable[[LineContext], Optional[LineAction]]] = [
    _leading_blank,
    _percent_marker,
    _program_number,
    _program_end,
    _program_stop,
    _default,
]


def classify(ctx: LineContext) -> LineAction:
    for rule in LINE_RULES:
        action = rule(ctx)
        if action is not None:
            return action
    return LineAction.SKIP


def _timestamp(now: Callable[[], datetime]) -> str:
    return now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _merge_banner(file_count: int, tools_remapped: int, generated: str) -> List[str]:
    lines = [
        BANNER_RULE,
        "(NC File Merger - Merged Output)",
        f"(Total Files: {file_count})",
        f"(Generated: {generated})",
    ]
    if tools_remapped:
        lines.append(f"(Tools Remapped: {tools_remapped})")
    lines.extend([BANNER_RULE, ""])
    return lines


def _file_banner(index: int, filename: str) -> List[str]:
    return ["", BANNER_RULE, f"(File {index + 1}: {filename})", BANNER_RULE, ""]


def _mapping_table(mappings: List[ToolMapping], files: List[NCFile]) -> List[str]:
    by_file: Dict[int, List[ToolMapping]] = {}
    for m in mappings:
        by_file.setdefault(m.file_index, []).append(m)

    lines = ["", BANNER_RULE, "(Tool Remapping Table)", BANNER_RULE]
    for file_index, file_mappings in by_file.items():
        lines.append(f"(File {file_index + 1}: {files[file_index].filename})")
        lines.extend(f"(  {m.original} -> {m.remapped})" for m in file_mappings)
    lines.extend([BANNER_RULE, ""])
    return lines


def _check_inputs(files: List[NCFile]) -> None:
    if not files:
        raise EmptyInputError()
    for nc_file in files:
        if not is_valid_nc_file(nc_file.content):
            logger.info("Rejecting %s: no G or M words found", nc_file.filename)
            raise InvalidFileError(nc_file.filename)


def merge(files: List[NCFile], options: MergeOptions = MergeOptions(),
          now: Callable[[], datetime] = _utcnow) -> MergeResult:
    """
    Merges `files` in order.

    Raises EmptyInputError when there is nothing to merge and InvalidFileError
    for the first file without any G/M words. Output is assembled in memory,
    so a failure never leaves a partial program behind.
    """
    _check_inputs(files)

    processed = files
    tool_mappings: List[ToolMapping] = []
    if options.remap_tools:
        remapped = remap_multiple_files(files)
        processed = [NCFile(f.filename, r.content) for f, r in zip(files, remapped.files)]
        tool_mappings = remapped.all_mappings

    out: List[str] = []
    total_lines = 0
    end_emitted = False
    template = options.template

    if template and template.header:
        out.extend([template.header, ""])

    if options.add_comments:
        out.extend(_merge_banner(len(files), len(tool_mappings), _timestamp(now)))

    for file_index, nc_file in enumerate(processed):
        if options.add_comments:
            out.extend(_file_banner(file_index, nc_file.filename))

        lines = [line.strip() for line in nc_file.content.split("\n")]
        total_lines += len(lines)

        for line_index, line in enumerate(lines):
            ctx = LineContext(
                line=line,
                line_index=line_index,
                file_index=file_index,
                file_count=len(processed),
                filename=nc_file.filename,
                options=options,
                output_empty=not out,
            )
            action = classify(ctx)
            if action is LineAction.SKIP:
                continue
            if action is LineAction.EMIT_WITH_COMMENT:
                out.append(f"(Program stop from {nc_file.filename})")
            out.append(line)
            if PROGRAM_END_RE.match(line):
                end_emitted = True

    if tool_mappings and options.add_comments:
        out.extend(_mapping_table(tool_mappings, files))

    if not end_emitted:
        out.append("M30")

    if template and template.footer:
        out.extend(["", template.footer])

    if options.preserve_headers:
        out.append("%")

    logger.debug("Merged %d file(s), %d input line(s)", len(files), total_lines)
    return MergeResult(
        content="\n".join(out),
        tool_mappings=tool_mappings,
        stats=MergeStats(
            total_files=len(files),
            total_lines=total_lines,
            tools_remapped=len(tool_mappings),
        ),
    )


def preview(files: List[NCFile], options: MergeOptions = MergeOptions()) -> PreviewResult:
    """Per-file statistics, tool conflicts and a rough output size. Nothing is rewritten."""
    file_stats = []
    for nc_file in files:
        stats = get_stats(nc_file.content)
        file_stats.append(FileStats(
            filename=nc_file.filename,
            lines=stats.total_lines,
            tools=sorted(stats.tools),
            g_codes=sorted(stats.g_codes),
            m_codes=sorted(stats.m_codes),
        ))

    conflicting = find_conflicts(files)

    estimated = sum(len(f.content.split("\n")) for f in files)
    if options.add_comments:
        estimated += len(files) * PREVIEW_LINES_PER_FILE + PREVIEW_HEADER_LINES

    return PreviewResult(
        file_stats=file_stats,
        conflicts=ToolConflicts(has_tool_conflicts=bool(conflicting), conflicting_tools=conflicting),
        estimated_output_lines=estimated,
    )
