"""Prerender CLI — prerender generate / prerender init.

Entry point for the ``prerender`` command-line interface.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

CONFIG_TEMPLATE = Path(__file__).parent / "templates" / "prerender.config.py"
CONFIG_FILENAME = "prerender.config.py"


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the prerender CLI."""
    parser = argparse.ArgumentParser(
        prog="prerender",
        description="Render a single-page app to static HTML with a headless browser.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # prerender generate
    generate_parser = subparsers.add_parser(
        "generate",
        aliases=["gen"],
        help="Generate static pages",
    )
    generate_parser.add_argument("-c", "--config", default=None, help="Configuration file path")
    generate_parser.add_argument(
        "--input-dir", default=None, help="Built app directory (overrides config)",
    )
    generate_parser.add_argument(
        "--output-dir", default=None, help="Output directory (overrides config)",
    )
    generate_parser.add_argument(
        "--verbose", action="store_true", help="Print every render attempt",
    )

    # prerender init
    init_parser = subparsers.add_parser(
        "init",
        help=f"Create a {CONFIG_FILENAME} in the current directory",
    )
    init_parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite an existing configuration file",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from prerender import __version__

    return __version__


async def run_generate(
    config_path: str | None = None,
    *,
    input_dir: str | None = None,
    output_dir: str | None = None,
    verbose: bool = False,
) -> int:
    """Load config, run the build command, render.  Returns the exit status."""
    from prerender.banner import print_attempts, print_banner, print_summary
    from prerender.build import run_build
    from prerender.config_loader import load_config
    from prerender.generator import generate
    from prerender.observability import EventLog

    overrides: dict[str, object] = {}
    if input_dir:
        overrides["input_dir"] = input_dir
    if output_dir:
        overrides["output_dir"] = output_dir

    event_log = EventLog()
    try:
        config = await load_config(config_path, **overrides)
        build_command = None if config.skip_build else config.build_command
        print_banner(config, build_command=build_command)

        if build_command:
            await run_build(build_command)

        stats = await generate(config, event_log=event_log)
    except Exception as exc:
        if verbose:
            print_attempts(event_log)
        print(f"  Generation failed: {exc}", file=sys.stderr)
        return 1

    if verbose:
        print_attempts(event_log)
    print_summary(stats, config.output_dir)
    return 1 if stats.failed > 0 else 0


def init_config(cwd: Path, *, force: bool = False) -> int:
    """Write the config template into *cwd*.  Returns the exit status."""
    target = cwd / CONFIG_FILENAME
    if target.exists() and not force:
        print(f"  {CONFIG_FILENAME} already exists (use --force to overwrite)", file=sys.stderr)
        return 1

    target.write_text(CONFIG_TEMPLATE.read_text(encoding="utf-8"), encoding="utf-8")
    print(f"  Created {target}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command in ("generate", "gen"):
        status = asyncio.run(run_generate(
            args.config,
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            verbose=args.verbose,
        ))
    else:
        status = init_config(Path.cwd(), force=args.force)

    sys.exit(status)


if __name__ == "__main__":
    main()
