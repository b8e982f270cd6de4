# src/ncmerge/models.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass(frozen=True)
class NCFile:
    """Immutable input program: a filename and its raw text."""
    filename: str
    content: str


@dataclass(frozen=True)
class Template:
    header: Optional[str] = None
    footer: Optional[str] = None


@dataclass(frozen=True)
class MergeOptions:
    add_comments: bool = False
    preserve_headers: bool = False
    remap_tools: bool = False
    template: Optional[Template] = None

    @classmethod
    def from_flags(cls, add_comments="false", preserve_headers="false",
                   remap_tools="false", template: Optional[Template] = None) -> "MergeOptions":
        """Builds options from request-style flags ("true"/"false" strings or bools)."""
        return cls(
            add_comments=_as_bool(add_comments),
            preserve_headers=_as_bool(preserve_headers),
            remap_tools=_as_bool(remap_tools),
            template=template,
        )


@dataclass(frozen=True)
class ToolMapping:
    original: str
    remapped: str
    file_index: int

    def to_dict(self) -> Dict:
        return {"original": self.original, "remapped": self.remapped, "fileIndex": self.file_index}


@dataclass(frozen=True)
class ValidationIssue:
    line: int
    message: str
    code: str

    def to_dict(self) -> Dict:
        return {"line": self.line, "message": self.message, "code": self.code}


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class Stats:
    total_lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    empty_lines: int = 0
    g_codes: Set[str] = field(default_factory=set)
    m_codes: Set[str] = field(default_factory=set)
    tools: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict:
        return {
            "totalLines": self.total_lines,
            "codeLines": self.code_lines,
            "commentLines": self.comment_lines,
            "emptyLines": self.empty_lines,
            "gCodes": sorted(self.g_codes),
            "mCodes": sorted(self.m_codes),
            "tools": sorted(self.tools),
        }


@dataclass(frozen=True)
class RemapResult:
    content: str
    mappings: List[ToolMapping]


@dataclass(frozen=True)
class MultiRemapResult:
    files: List[RemapResult]
    all_mappings: List[ToolMapping]


@dataclass(frozen=True)
class MergeStats:
    total_files: int
    total_lines: int
    tools_remapped: int

    def to_dict(self) -> Dict:
        return {
            "totalFiles": self.total_files,
            "totalLines": self.total_lines,
            "toolsRemapped": self.tools_remapped,
        }


@dataclass(frozen=True)
class MergeResult:
    content: str
    tool_mappings: List[ToolMapping]
    stats: MergeStats

    def to_dict(self) -> Dict:
        return {
            "content": self.content,
            "toolMappings": [m.to_dict() for m in self.tool_mappings],
            "stats": self.stats.to_dict(),
        }


@dataclass(frozen=True)
class FileStats:
    filename: str
    lines: int
    tools: List[str]
    g_codes: List[str]
    m_codes: List[str]

    def to_dict(self) -> Dict:
        return {
            "filename": self.filename,
            "lines": self.lines,
            "tools": self.tools,
            "gCodes": self.g_codes,
            "mCodes": self.m_codes,
        }


@dataclass(frozen=True)
class ToolConflicts:
    has_tool_conflicts: bool
    conflicting_tools: List[str]

    def to_dict(self) -> Dict:
        return {
            "hasToolConflicts": self.has_tool_conflicts,
            "conflictingTools": self.conflicting_tools,
        }


@dataclass(frozen=True)
class PreviewResult:
    file_stats: List[FileStats]
    conflicts: ToolConflicts
    estimated_output_lines: int

    def to_dict(self) -> Dict:
        return {
            "fileStats": [s.to_dict() for s in self.file_stats],
            "conflicts": self.conflicts.to_dict(),
            "estimatedOutputLines": self.estimated_output_lines,
        }
