# src/ncmerge/core/validator.py
"""
Line classification, syntax checks and per-file statistics for NC programs.

Everything here is a pure function of the file content. Problems found in a
program are returned as ValidationIssue records; nothing in this module raises.
"""
import re
from enum import Enum
from typing import List

from ncmerge.models import Stats, ValidationIssue, ValidationResult

GM_CODE_RE = re.compile(r"[GM]\d+", re.IGNORECASE | re.ASCII)
COORDINATE_RE = re.compile(r"[XYZABCUVWIJK]-?\d+\.?\d*", re.IGNORECASE | re.ASCII)
T_CODE_RE = re.compile(r"T\d+", re.IGNORECASE | re.ASCII)
S_CODE_RE = re.compile(r"S\d+", re.IGNORECASE | re.ASCII)
F_CODE_RE = re.compile(r"F\d+\.?\d*", re.IGNORECASE | re.ASCII)
O_CODE_RE = re.compile(r"O\d+", re.IGNORECASE | re.ASCII)
N_CODE_RE = re.compile(r"N\d+", re.IGNORECASE | re.ASCII)
SPACED_CODE_RE = re.compile(r"[GM]\s+\d+", re.IGNORECASE | re.ASCII)
MOTION_RE = re.compile(r"G0?[0-3]\b", re.IGNORECASE | re.ASCII)

G_WORD_RE = re.compile(r"G(\d+)", re.IGNORECASE | re.ASCII)
M_WORD_RE = re.compile(r"M(\d+)", re.IGNORECASE | re.ASCII)
T_WORD_RE = re.compile(r"T(\d+)", re.IGNORECASE | re.ASCII)

COMMENT_PREFIXES = ("(", ";")


class LineKind(Enum):
    BLANK = "blank"
    COMMENT = "comment"
    CODE = "code"


def classify_line(line: str) -> LineKind:
    trimmed = line.strip()
    if not trimmed:
        return LineKind.BLANK
    if trimmed.startswith(COMMENT_PREFIXES):
        return LineKind.COMMENT
    return LineKind.CODE


def is_valid_nc_file(content: str) -> bool:
    """True if the content holds at least one G or M word."""
    return GM_CODE_RE.search(content) is not None


def get_stats(content: str) -> Stats:
    lines = content.split("\n")
    stats = Stats(total_lines=len(lines))

    for line in lines:
        kind = classify_line(line)
        if kind is LineKind.BLANK:
            stats.empty_lines += 1
            continue
        if kind is LineKind.COMMENT:
            stats.comment_lines += 1
            continue

        stats.code_lines += 1
        trimmed = line.strip()
        stats.g_codes.update(f"G{m}" for m in G_WORD_RE.findall(trimmed))
        stats.m_codes.update(f"M{m}" for m in M_WORD_RE.findall(trimmed))
        stats.tools.update(f"T{m}" for m in T_WORD_RE.findall(trimmed))

    return stats


def _is_pure_comment(trimmed: str) -> bool:
    return (trimmed.startswith("(") and trimmed.endswith(")")) or trimmed.startswith(";")


def validate(content: str) -> ValidationResult:
    """
    Single forward pass over the program.

    Parenthesis depth is the only state carried between lines; every other
    check only looks at the current (trimmed) line. Warnings never affect
    the `valid` flag.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    lines = content.split("\n")
    paren_depth = 0

    for line_num, line in enumerate(lines, start=1):
        trimmed = line.strip()
        if not trimmed:
            continue

        for char in trimmed:
            if char == "(":
                paren_depth += 1
            elif char == ")":
                paren_depth -= 1
                if paren_depth < 0:
                    errors.append(ValidationIssue(line_num, "Unmatched closing parenthesis", "UNMATCHED_PAREN"))

        if _is_pure_comment(trimmed):
            continue

        has_gm_code = GM_CODE_RE.search(trimmed) is not None
        has_coordinate = COORDINATE_RE.search(trimmed) is not None
        has_f_code = F_CODE_RE.search(trimmed) is not None
        detectors = (
            has_gm_code,
            has_coordinate,
            T_CODE_RE.search(trimmed) is not None,
            S_CODE_RE.search(trimmed) is not None,
            has_f_code,
            O_CODE_RE.search(trimmed) is not None,
            trimmed == "%",
            N_CODE_RE.search(trimmed) is not None,
        )

        # Lines opening a comment that is closed later still count as comments here
        if not any(detectors) and not trimmed.startswith(COMMENT_PREFIXES):
            warnings.append(ValidationIssue(line_num, "Line may not contain valid G-code", "POSSIBLY_INVALID"))

        if SPACED_CODE_RE.search(trimmed):
            warnings.append(ValidationIssue(
                line_num,
                'Space detected between G/M and number (e.g., "G 01" should be "G01")',
                "SPACE_IN_CODE",
            ))

        if MOTION_RE.search(trimmed) and not has_coordinate:
            warnings.append(ValidationIssue(line_num, "Movement command without coordinates", "NO_COORDINATES"))

        if has_f_code and not has_gm_code and line_num > 1:
            warnings.append(ValidationIssue(
                line_num, "Feed rate (F) specified without G-code command", "ORPHAN_FEED"
            ))

    if paren_depth != 0:
        errors.append(ValidationIssue(len(lines), "Unclosed parenthesis at end of file", "UNCLOSED_PAREN"))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
