# src/ncmerge/core/remapper.py
"""
Tool number (T code) remapping so that programs merged together never share
a tool number.
"""
import logging
import re
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from ncmerge.models import MultiRemapResult, NCFile, RemapResult, ToolMapping

logger = logging.getLogger(__name__)

TOOL_RE = re.compile(r"T(\d+)", re.IGNORECASE | re.ASCII)


def _tools_in_order(content: str) -> List[str]:
    # Discovery order keeps sorting deterministic when T1 and T01 tie numerically
    return list(dict.fromkeys(TOOL_RE.findall(content)))


def extract_tools(content: str) -> Set[str]:
    """Raw digit strings of every T word; T1 and T01 are distinct keys."""
    return set(_tools_in_order(content))


def _replace_tool(content: str, tool: str, new_tool: str) -> str:
    pattern = re.compile(rf"\bT{tool}\b", re.IGNORECASE | re.ASCII)
    return pattern.sub(f"T{new_tool}", content)


def _assign_file(
    counter: int, file_index: int, tools: List[str], assigned: Dict[Tuple[int, str], str]
) -> Tuple[int, List[ToolMapping]]:
    mappings = []
    for tool in sorted(tools, key=int):
        key = (file_index, tool)
        if key in assigned:
            continue
        new_tool = str(counter).zfill(len(tool))
        assigned[key] = new_tool
        mappings.append(ToolMapping(f"T{tool}", f"T{new_tool}", file_index))
        counter += 1
    return counter, mappings


def remap_multiple_files(files: List[NCFile], start_number: int = 1) -> MultiRemapResult:
    """
    Gives every (file, tool) pair its own number from one counter shared by
    all files, then rewrites each file.

    New numbers are zero-padded to the width of the original token; a counter
    that outgrows that width simply produces a longer token.
    """
    file_tools = [_tools_in_order(f.content) for f in files]

    assigned: Dict[Tuple[int, str], str] = {}
    all_mappings: List[ToolMapping] = []
    counter = start_number
    for file_index, tools in enumerate(file_tools):
        counter, mappings = _assign_file(counter, file_index, tools, assigned)
        all_mappings.extend(mappings)

    remapped_files = []
    for file_index, (nc_file, tools) in enumerate(zip(files, file_tools)):
        content = nc_file.content
        file_mappings = []
        # Descending, so a shorter tool never rewrites part of a longer one first
        for tool in sorted(tools, key=int, reverse=True):
            new_tool = assigned[(file_index, tool)]
            content = _replace_tool(content, tool, new_tool)
            file_mappings.append(ToolMapping(f"T{tool}", f"T{new_tool}", file_index))
        remapped_files.append(RemapResult(content=content, mappings=file_mappings))

    logger.debug("Remapped %d tool(s) across %d file(s)", len(all_mappings), len(files))
    return MultiRemapResult(files=remapped_files, all_mappings=all_mappings)


def remap_single_file(content: str, mapping: Mapping[str, str]) -> RemapResult:
    """Applies a caller-supplied {original digits: new digits} map to one program."""
    mappings = []
    for original, remapped in sorted(mapping.items(), key=lambda item: len(item[0]), reverse=True):
        content = _replace_tool(content, original, remapped)
        mappings.append(ToolMapping(f"T{original}", f"T{remapped}", 0))
    return RemapResult(content=content, mappings=mappings)


def find_conflicts(files: Iterable[NCFile]) -> List[str]:
    """Sorted T words whose raw number appears in more than one file."""
    seen: Set[str] = set()
    conflicting: Set[str] = set()
    for nc_file in files:
        for tool in extract_tools(nc_file.content):
            if tool in seen:
                conflicting.add(f"T{tool}")
            seen.add(tool)
    return sorted(conflicting)


def has_conflicts(files: Iterable[NCFile]) -> bool:
    return bool(find_conflicts(files))


def generate_mapping_table(mappings: List[ToolMapping]) -> str:
    if not mappings:
        return "No tool remapping required."

    rule = "─" * 40
    lines = ["Tool Remapping:", rule, "File | Original | New Tool", rule]
    for m in mappings:
        lines.append(f"  {m.file_index + 1}  | {m.original:<8} | {m.remapped}")
    lines.append(rule)
    return "\n".join(lines) + "\n"
