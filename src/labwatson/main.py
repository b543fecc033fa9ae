"""Command line entry point for labwatson.

Usage:
    labwatson init path/to/project --name "my-study" --authors "A. Author"
    labwatson savename params.json --prefix data/sims/ --suffix json
    labwatson expand template.json
    labwatson expand template.json --count
    labwatson collect data/sims --subfolders --black-list longvector --csv results.csv
    labwatson commit
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from labwatson.config import CollectConfig, NamingPolicy
from labwatson.data.collection import collect_results
from labwatson.data.expansion import dict_list, dict_list_count
from labwatson.data.storage import json_default
from labwatson.data.tagging import current_commit
from labwatson.exceptions import LabWatsonError
from labwatson.naming.savename import savename
from labwatson.project.initialize import initialize_project

logger = logging.getLogger(__name__)


def _read_json_object(path: str) -> Dict[str, Any]:
    """Read a JSON object from a file, or from stdin when path is '-'."""
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def cmd_init(args: argparse.Namespace) -> int:
    context = initialize_project(
        args.path,
        name=args.name,
        readme=not args.no_readme,
        authors=args.authors,
        force=args.force,
        git=not args.no_git,
    )
    print(context.root)
    return 0


def cmd_savename(args: argparse.Namespace) -> int:
    params = _read_json_object(args.params)
    policy = NamingPolicy(
        allowed_kinds=args.kinds,
        digits=args.digits,
        connector=args.connector,
        prefix=args.prefix,
        suffix=args.suffix,
    )
    print(savename(params, policy=policy))
    return 0


def cmd_expand(args: argparse.Namespace) -> int:
    template = _read_json_object(args.template)
    if args.count:
        print(dict_list_count(template))
        return 0
    for config in dict_list(template):
        print(json.dumps(config, ensure_ascii=False))
    return 0


def cmd_collect(args: argparse.Namespace) -> int:
    config = CollectConfig(
        filename=args.filename,
        subfolders=args.subfolders,
        valid_filetypes=tuple(args.ext),
        white_list=tuple(args.white_list) if args.white_list else None,
        black_list=tuple(args.black_list or ()),
    )
    table = collect_results(args.folder, config)
    if args.csv:
        table.to_dataframe().to_csv(args.csv, index=False)
        logger.info(f"Wrote {len(table)} rows to {args.csv}")
    else:
        for row in table.rows():
            print(json.dumps(row, ensure_ascii=False, default=json_default))
    return 0


def cmd_commit(args: argparse.Namespace) -> int:
    commit = current_commit(args.path)
    if commit is None:
        return 1
    print(commit)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labwatson",
        description="Run and organize scientific projects",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Initialize a new project")
    p.add_argument("path", help="Project directory")
    p.add_argument("--name", default=None, help="Project name (default: folder name)")
    p.add_argument("--authors", nargs="*", default=None, help="Author names")
    p.add_argument("--no-readme", action="store_true", help="Do not write README.md")
    p.add_argument("--force", action="store_true", help="Delete existing contents of path")
    p.add_argument("--no-git", action="store_true", help="Do not create a git repository")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("savename", help="Print the name of a parameter set")
    p.add_argument("params", help="JSON file with a parameter object ('-' for stdin)")
    p.add_argument("--prefix", default="", help="Name prefix (a trailing '/' marks a directory)")
    p.add_argument("--suffix", default="", help="Name suffix, appended after '.'")
    p.add_argument("--digits", type=int, default=3, help="Decimal places for floats")
    p.add_argument("--connector", default="_", help="String joining entries")
    p.add_argument(
        "--kinds",
        nargs="*",
        default=None,
        help="Value kinds to include (numeric, text, boolean, sequence, opaque)",
    )
    p.set_defaults(func=cmd_savename)

    p = sub.add_parser("expand", help="Expand a template into run configurations")
    p.add_argument("template", help="JSON file with a template object ('-' for stdin)")
    p.add_argument("--count", action="store_true", help="Only print the number of configurations")
    p.set_defaults(func=cmd_expand)

    p = sub.add_parser("collect", help="Collect result files into a table")
    p.add_argument("folder", help="Directory holding result files")
    p.add_argument("--subfolders", action="store_true", help="Also scan subdirectories")
    p.add_argument(
        "--filename",
        default=None,
        help="Table file to load and save ('' disables persistence)",
    )
    p.add_argument("--ext", nargs="+", default=[".json"], help="Valid result file suffixes")
    p.add_argument("--white-list", nargs="*", default=None, help="Keys to keep")
    p.add_argument("--black-list", nargs="*", default=None, help="Keys to drop")
    p.add_argument("--csv", default=None, help="Write the table to this CSV file")
    p.set_defaults(func=cmd_collect)

    p = sub.add_parser("commit", help="Print the current git commit")
    p.add_argument("path", nargs="?", default=None, help="Repository directory")
    p.set_defaults(func=cmd_commit)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
    )

    try:
        return args.func(args)
    except (LabWatsonError, ValueError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
