#!/usr/bin/env python3
"""
flowdoc CLI - flow diagrams for contracts and scenarios

Usage:
    flowdoc show <files...>                Print each flow's documentation section
    flowdoc render <files...> -o FILE      Write the flow document
    flowdoc check <files...> --doc FILE    Exit 1 when FILE is out of date
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .core.drift import check_drift
from .flow import extract_flows
from .parser.config import is_supported_file
from .views.section import render_flow_document, render_flow_section

EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="flowdoc",
        description="flowdoc: flow diagrams for contracts and scenarios",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    flowdoc show src/cart.ts
    flowdoc show src/cart.ts --owner cart.add --json
    flowdoc render src/*.ts -o docs/flows.md
    flowdoc check src/*.ts --doc docs/flows.md
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # show command
    show_parser = subparsers.add_parser("show", help="Print flow sections")
    show_parser.add_argument("files", nargs="+", help="Source files")
    show_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    show_parser.add_argument("--owner", help="Only show the contract/scenario with this id")

    # render command
    render_parser = subparsers.add_parser("render", help="Render the flow document")
    render_parser.add_argument("files", nargs="+", help="Source files")
    render_parser.add_argument("--output", "-o", help="Output file path (default: stdout)")
    render_parser.add_argument("--title", default="Flows", help="Document title")

    # check command
    check_parser = subparsers.add_parser("check", help="Check a flow document for drift")
    check_parser.add_argument("files", nargs="+", help="Source files")
    check_parser.add_argument("--doc", required=True, help="Generated document to check")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    artifacts = _load_artifacts(args.files)
    if artifacts is None:
        return EXIT_USAGE

    if args.command == "show":
        return cmd_show(artifacts, args)
    elif args.command == "render":
        return cmd_render(artifacts, args)
    elif args.command == "check":
        return cmd_check(artifacts, args)

    return EXIT_OK


def _load_artifacts(files):
    artifacts = []
    for name in files:
        path = Path(name)
        if not is_supported_file(path):
            print(f"Skipping unsupported file: {path}", file=sys.stderr)
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return None
        found = extract_flows(text, path)
        print(f"{path}: {len(found)} flow(s)", file=sys.stderr)
        artifacts.extend(found)
    return artifacts


def cmd_show(artifacts, args):
    """Handle show command."""
    if args.owner:
        artifacts = [a for a in artifacts if a.owner_id == args.owner]
        if not artifacts:
            print(f"No contract or scenario named: {args.owner}", file=sys.stderr)
            return EXIT_NOT_FOUND

    if args.json:
        print(json.dumps([a.to_dict() for a in artifacts], indent=2))
        return EXIT_OK

    for artifact in artifacts:
        print(f"## {artifact.owner_kind.value.capitalize()}: `{artifact.owner_id}`")
        print("")
        print(render_flow_section(artifact))

    return EXIT_OK


def cmd_render(artifacts, args):
    """Handle render command."""
    document = render_flow_document(artifacts, title=args.title)

    if not args.output:
        print(document)
        return EXIT_OK

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding="utf-8")
    print(f"Wrote {len(artifacts)} flow(s) to {output}", file=sys.stderr)
    return EXIT_OK


def cmd_check(artifacts, args):
    """Handle check command."""
    doc = Path(args.doc)
    try:
        markdown = doc.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error reading {doc}: {e}", file=sys.stderr)
        return EXIT_USAGE

    report = check_drift(artifacts, markdown)
    if report.is_current:
        print(f"{doc} is up to date ({len(artifacts)} flow(s))", file=sys.stderr)
        return EXIT_OK

    for line in report.describe():
        print(line)
    print(f"{doc} is out of date; run `flowdoc render ... -o {doc}`", file=sys.stderr)
    return EXIT_DRIFT


if __name__ == "__main__":
    sys.exit(main())
