#!/usr/bin/env python3
"""
Code Constellation CLI

Scans a source tree for import/include statements and emits the file
dependency graph as JSON (for graph renderers) or as a Mermaid flowchart.
"""

import argparse
import logging
import sys
from pathlib import Path

from scanner import ScanConfig, ScanError, build_graph, load_config
from scanner.config import normalize_extension
from exporters import to_mermaid, to_json


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="constellation",
        description="Scan a source tree for imports and generate a file dependency graph.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  constellation .                          # Scan current directory, JSON output
  constellation ./src -f mermaid           # Mermaid flowchart for src/
  constellation . -o graph.json            # JSON output to file
  constellation . --include-ext .ts .tsx   # Only scan TypeScript files
  constellation . --no-gitignore           # Ignore the root .gitignore
  constellation . --config scan.yaml       # Load settings from a file
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to scan (default: current directory)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["json", "mermaid"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "--keep-dangling",
        action="store_true",
        help="Keep links to files that are not graph nodes (JSON output)",
    )

    parser.add_argument(
        "--no-preview",
        action="store_true",
        help="Omit file previews from JSON output",
    )

    # Mermaid-specific options
    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-dir",
        action="store_true",
        help="Group nodes by top-level directory in Mermaid output",
    )

    parser.add_argument(
        "--show-all",
        action="store_true",
        help="Include files with no links in Mermaid output",
    )

    # Scanning options
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Settings file (.yaml, .yml, .toml or .json)",
    )

    parser.add_argument(
        "--include-ext",
        nargs="+",
        default=None,
        help="File extensions to include (e.g., .ts .py)",
    )

    parser.add_argument(
        "--exclude-dir",
        nargs="+",
        default=None,
        help="Extra directory names to exclude",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum directory depth to scan",
    )

    parser.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not apply patterns from the root .gitignore",
    )

    parser.add_argument(
        "--keep-duplicates",
        action="store_true",
        help="Emit one link per import statement instead of one per file pair",
    )

    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="Maximum number of files processed concurrently",
    )

    # Logging options
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log skipped files and unresolved imports",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    return parser.parse_args(args)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_config(parsed) -> ScanConfig:
    """Merge defaults, the optional config file, and command line flags."""
    config = ScanConfig()
    if parsed.config:
        config = load_config(Path(parsed.config), config)

    extensions = None
    if parsed.include_ext:
        extensions = {normalize_extension(ext) for ext in parsed.include_ext}

    return config.merged(
        extensions=extensions,
        exclude_dirs=set(config.exclude_dirs) | set(parsed.exclude_dir) if parsed.exclude_dir else None,
        max_depth=parsed.max_depth,
        respect_gitignore=False if parsed.no_gitignore else None,
        dedupe_links=False if parsed.keep_duplicates else None,
        max_workers=parsed.jobs,
    )


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)
    configure_logging(parsed.verbose, parsed.quiet)

    try:
        config = build_config(parsed)
        graph = build_graph(parsed.root, config)
    except ScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{len(graph)} files, {len(graph.links)} links", file=sys.stderr)

    # Generate output
    if parsed.format == "mermaid":
        output = to_mermaid(
            graph=graph,
            orientation=parsed.orientation,
            group_by_directory=parsed.group_by_dir,
            show_all=parsed.show_all,
        )
    else:  # json (default)
        output = to_json(
            graph=graph,
            include_dangling=parsed.keep_dangling,
            include_preview=not parsed.no_preview,
        )

    # Write output
    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.write_text(output, encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
