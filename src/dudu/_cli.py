"""Dudu CLI — dudu build / dudu serve / dudu new.

Entry point for the ``dudu`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _add_source_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-s", "--source", default=None, help="Source directory for markdown (default: md)")
    parser.add_argument("-r", "--resources", default=None, help="Resource directory (default: resources)")
    parser.add_argument("--root", default=".", help="Project root directory")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the dudu CLI."""
    parser = argparse.ArgumentParser(
        prog="dudu",
        description="Markdown static-site builder with a live-reloading dev server.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # dudu build
    build_parser = subparsers.add_parser("build", help="Build the site into the output directory")
    build_parser.add_argument("-o", "--output", default=None, help="Output directory (default: static)")
    _add_source_flags(build_parser)
    build_parser.add_argument(
        "-f", "--force",
        action="store_true",
        default=None,
        help="Force regeneration of previously cached output files",
    )

    # dudu serve
    serve_parser = subparsers.add_parser("serve", help="Serve the site with live reload")
    serve_parser.add_argument("-p", "--port", type=int, default=None, help="HTTP port to listen on (default: 8080)")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    _add_source_flags(serve_parser)

    # dudu new
    subparsers.add_parser("new", help="Create a new project interactively")

    # dudu help
    subparsers.add_parser("help", help="Show this help")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from dudu import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        parser.print_help()
        sys.exit(0)

    from dudu._errors import DuduError

    try:
        if args.command == "build":
            from dudu.app import build

            build(
                root=args.root,
                output_dir=args.output,
                source_dir=args.source,
                resource_dir=args.resources,
                force=args.force,
            )
        elif args.command == "serve":
            from dudu.app import serve

            serve(
                root=args.root,
                port=args.port,
                host=args.host,
                source_dir=args.source,
                resource_dir=args.resources,
            )
        elif args.command == "new":
            from dudu.scaffold import new_project, prompt_project_name

            print(f"dudu {_get_version()} project creator")
            name = prompt_project_name()
            path = new_project(name)
            print(f"Project created. Run `cd {path.name} && dudu serve` to start working!")
    except DuduError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
