# src/ncmerge/cli.py
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from ncmerge.config import DEFAULT_OUTPUT_NAME, IGNORE_FILENAME
from ncmerge.core.ignore import bootstrap_ncignore, load_ignore_spec
from ncmerge.core.merger import merge, preview
from ncmerge.core.remapper import generate_mapping_table
from ncmerge.core.scanner import ProgramScanner, read_nc_file
from ncmerge.core.templates import TemplateStore
from ncmerge.core.validator import get_stats, validate
from ncmerge.errors import NCMergeError
from ncmerge.models import MergeOptions, NCFile

logger = logging.getLogger("ncmerge")


def _add_merge_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", help="NC files or directories, merged in the order given")
    parser.add_argument("-c", "--comments", action="store_true", help="Add banner comments and a tool table")
    parser.add_argument("-p", "--preserve-headers", action="store_true", help="Keep the leading %% and first O number")
    parser.add_argument("-r", "--remap-tools", action="store_true", help="Renumber tools so no two files share one")
    parser.add_argument("-t", "--template", type=str, default=None, help="Header/footer template name")
    parser.add_argument("--template-dir", type=str, default=None, help="Directory with <name>.header.nc/<name>.footer.nc")
    parser.add_argument("-e", "--extensions", type=str, default=None,
                        help="Comma-separated extensions used when scanning directories")
    parser.add_argument("--init-ignore", action="store_true", help=f"Create {IGNORE_FILENAME} in scanned directories")
    parser.add_argument("--copy-gitignore", action="store_true",
                        help=f"With --init-ignore, seed {IGNORE_FILENAME} from .gitignore")


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="ncmerge",
        description="Merge NC (G-code) programs into one, with validation and tool renumbering.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Check programs for syntax problems")
    p_validate.add_argument("paths", nargs="+", help="NC files or directories")
    p_validate.add_argument("-e", "--extensions", type=str, default=None)
    p_validate.add_argument("--json", action="store_true", help="Print results as JSON")

    p_preview = sub.add_parser("preview", help="Show statistics and conflicts without writing anything")
    _add_merge_flags(p_preview)
    p_preview.add_argument("--show-content", action="store_true", help="Print the merged program too")
    p_preview.add_argument("--json", action="store_true", help="Print results as JSON")

    p_merge = sub.add_parser("merge", help="Merge programs into one file")
    _add_merge_flags(p_merge)
    p_merge.add_argument("-o", "--output", type=str, default=DEFAULT_OUTPUT_NAME,
                         help=f"Output file, '-' for stdout (default: {DEFAULT_OUTPUT_NAME})")
    p_merge.add_argument("--info", action="store_true", help="Print the tool table and merge stats")

    p_templates = sub.add_parser("templates", help="List available templates")
    p_templates.add_argument("--template-dir", type=str, default=None)
    p_templates.add_argument("--json", action="store_true", help="Print results as JSON")
    return parser


def parse_extensions(raw):
    if not raw:
        return None
    raw = raw.strip()
    if raw == "*":
        return {"*"}
    return {e.strip() if e.strip().startswith(".") else f".{e.strip()}" for e in raw.split(",") if e.strip()}


def collect_files(paths: List[str], extensions=None, init_ignore: bool = False, output_name: str = None,
                  copy_gitignore: bool = False) -> List[NCFile]:
    """Expands the command-line paths into NC files, keeping the given order."""
    files: List[NCFile] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            root_dir = path.resolve()
            if init_ignore:
                bootstrap_ncignore(root_dir, output_name, copy_gitignore=copy_gitignore)
            extra = [output_name] if output_name else None
            spec = load_ignore_spec(root_dir / IGNORE_FILENAME, extra_patterns=extra)
            found = ProgramScanner(root_dir, spec, extensions).scan()
            logger.info("Found %d program(s) in %s", len(found), root_dir)
            files.extend(found)
        elif path.is_file():
            files.append(read_nc_file(path))
        else:
            raise FileNotFoundError(f"No such file or directory: '{raw}'")
    return files


def build_options(args) -> MergeOptions:
    store = TemplateStore(Path(args.template_dir) if args.template_dir else None)
    return MergeOptions(
        add_comments=args.comments,
        preserve_headers=args.preserve_headers,
        remap_tools=args.remap_tools,
        template=store.require(args.template) if args.template else None,
    )


def run_validate(args) -> int:
    files = collect_files(args.paths, parse_extensions(args.extensions))
    results = []
    has_errors = False
    for nc_file in files:
        result = validate(nc_file.content)
        has_errors = has_errors or not result.valid
        results.append({
            "filename": nc_file.filename,
            "validation": result.to_dict(),
            "stats": get_stats(nc_file.content).to_dict(),
        })

    if args.json:
        print(json.dumps({"results": results}, indent=2))
        return 1 if has_errors else 0

    for entry in results:
        validation = entry["validation"]
        stats = entry["stats"]
        status = "OK" if validation["valid"] else "INVALID"
        print(f"{entry['filename']}: {status} "
              f"({stats['codeLines']} code, {stats['commentLines']} comment, {stats['emptyLines']} empty)")
        for issue in validation["errors"]:
            print(f"  error   line {issue['line']:<5} {issue['code']}: {issue['message']}")
        for issue in validation["warnings"]:
            print(f"  warning line {issue['line']:<5} {issue['code']}: {issue['message']}")
        if stats["tools"]:
            print(f"  tools: {', '.join(stats['tools'])}")
    return 1 if has_errors else 0


def run_preview(args) -> int:
    options = build_options(args)
    files = collect_files(args.paths, parse_extensions(args.extensions), args.init_ignore,
                          copy_gitignore=args.copy_gitignore)
    result = preview(files, options)
    merged = merge(files, options)

    if args.json:
        payload = result.to_dict()
        payload["mergedContent"] = merged.content
        payload["toolMappings"] = [m.to_dict() for m in merged.tool_mappings]
        print(json.dumps(payload, indent=2))
        return 0

    print("--- ncmerge preview ---")
    print(f"{'#':<4} | {'Lines':<7} | {'Tools':<20} | File")
    print("-" * 60)
    for i, fs in enumerate(result.file_stats):
        print(f"{i + 1:<4} | {fs.lines:<7} | {','.join(fs.tools) or '-':<20} | {fs.filename}")
    print("-" * 60)
    if result.conflicts.has_tool_conflicts:
        print(f"Tool conflicts: {', '.join(result.conflicts.conflicting_tools)}")
    else:
        print("Tool conflicts: none")
    print(f"Estimated output lines: {result.estimated_output_lines}")
    if merged.tool_mappings:
        print(generate_mapping_table(merged.tool_mappings), end="")
    if args.show_content:
        print("-" * 60)
        print(merged.content)
    return 0


def run_merge(args) -> int:
    options = build_options(args)
    output_name = None if args.output == "-" else Path(args.output).name
    files = collect_files(args.paths, parse_extensions(args.extensions), args.init_ignore, output_name,
                          copy_gitignore=args.copy_gitignore)
    result = merge(files, options)

    if args.output == "-":
        sys.stdout.write(result.content + "\n")
        return 0

    output_file = Path(args.output)
    print("--- ncmerge ---")
    print(f"Files:    {result.stats.total_files}")
    print(f"Output:   {output_file}")
    output_file.write_text(result.content + "\n", encoding="utf-8")

    if args.info:
        print(f"Input lines:    {result.stats.total_lines}")
        print(f"Tools remapped: {result.stats.tools_remapped}")
        print(generate_mapping_table(result.tool_mappings), end="")
    print(f"\nSuccess! Merged program written to: {output_file.name}")
    return 0


def run_templates(args) -> int:
    store = TemplateStore(Path(args.template_dir) if args.template_dir else None)
    templates = store.get_all_templates()
    if args.json:
        print(json.dumps({"templates": templates}, indent=2))
        return 0
    for t in templates:
        print(f"{t['name']:<16} {t['description']}")
    return 0


COMMANDS = {
    "validate": run_validate,
    "preview": run_preview,
    "merge": run_merge,
    "templates": run_templates,
}


def main(argv=None) -> int:
    parser = create_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="[%(levelname)s] %(message)s",
    )

    try:
        return COMMANDS[args.command](args)
    except NCMergeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.")
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
