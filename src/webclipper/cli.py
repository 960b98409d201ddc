"""Command-line interface for webclipper."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

# Verify core dependencies
try:
    import bs4  # noqa: F401
    import pydantic  # noqa: F401
    import requests  # noqa: F401
    import rich  # noqa: F401
except ImportError as e:
    print(f"\nERROR: Missing required dependency: {e.name}", file=sys.stderr)
    print("\nRecommended fixes:", file=sys.stderr)
    print("  1. For pip users: pip install --upgrade --force-reinstall webclipper", file=sys.stderr)
    print("  2. For development: pip install -e .[dev]", file=sys.stderr)
    sys.exit(1)

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .clipper import WebClipper
from .conversion.markdown import to_markdown
from .conversion.plaintext import markdown_to_plain_text_preview
from .conversion.renderer import EDITOR_CONVERTER, to_html
from .conversion.sanitizer import clean_html
from .errors import ClipperError
from .fetch import PageLoader, decode_html
from .logging_config import level_for, setup_logging
from .models.config import ClipperOptions, ClipProfile
from .models.profiles import apply_profile


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="webclipper",
        description="Clip web pages into Markdown scraps and convert between Markdown and HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clip the main content of a page, with a metadata header
  webclipper clip https://example.com/post

  # Clip a saved page, recording its original address
  webclipper clip saved.html --url https://example.com/post

  # Clip only a selection, as JSON
  webclipper clip page.html --selection selection.html --selection-only --json

  # Convert between formats (- reads stdin)
  webclipper to-markdown page.html
  webclipper to-html notes.md --editor
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only report errors",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        metavar="FILE",
        help="Also write log messages to FILE",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # clip
    clip_parser = subparsers.add_parser("clip", help="Clip a page into a Markdown scrap")
    clip_parser.add_argument("source", help="http(s) URL or local HTML file")
    clip_parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Address to record for the page (default: the source)",
    )
    clip_parser.add_argument(
        "--selection",
        type=Path,
        default=None,
        metavar="FILE",
        help="HTML file holding the selected fragment",
    )
    clip_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML file with clip options",
    )
    clip_parser.add_argument(
        "--profile",
        "-p",
        choices=["full", "selection", "minimal"],
        default=None,
        help="Preset profile",
    )

    option_group = clip_parser.add_argument_group("clip options")
    option_group.add_argument(
        "--selection-only",
        action="store_true",
        default=None,
        help="Clip only the selection (fails when nothing is selected)",
    )
    option_group.add_argument(
        "--no-metadata",
        action="store_false",
        dest="include_metadata",
        default=None,
        help="Do not prepend the metadata header",
    )
    option_group.add_argument(
        "--no-images",
        action="store_false",
        dest="preserve_images",
        default=None,
        help="Drop images",
    )
    option_group.add_argument(
        "--no-links",
        action="store_false",
        dest="preserve_links",
        default=None,
        help="Flatten links to their text",
    )
    option_group.add_argument(
        "--no-clean",
        action="store_false",
        dest="clean_html",
        default=None,
        help="Skip HTML sanitizing before conversion",
    )

    output_group = clip_parser.add_argument_group("output control")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print the whole scrap result as JSON",
    )
    _add_output_argument(output_group)

    # to-markdown
    md_parser = subparsers.add_parser("to-markdown", help="Convert HTML to Markdown")
    md_parser.add_argument("input", help="HTML file (- for stdin)")
    md_parser.add_argument(
        "--clean",
        action="store_true",
        help="Sanitize the HTML before converting",
    )
    _add_output_argument(md_parser)

    # to-html
    html_parser = subparsers.add_parser("to-html", help="Convert Markdown to HTML")
    html_parser.add_argument("input", help="Markdown file (- for stdin)")
    html_parser.add_argument(
        "--editor",
        action="store_true",
        help="Editor flavour: empty input gives <p></p>, HTML input passes through",
    )
    _add_output_argument(html_parser)

    # preview
    preview_parser = subparsers.add_parser("preview", help="Plain-text preview of Markdown")
    preview_parser.add_argument("input", help="Markdown file (- for stdin)")
    preview_parser.add_argument(
        "--max-length",
        type=int,
        default=150,
        help="Maximum preview length (default: 150)",
    )
    _add_output_argument(preview_parser)

    return parser


def _add_output_argument(parser: argparse._ActionsContainer) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write to FILE instead of stdout",
    )


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return decode_html(Path(source).read_bytes())
    except OSError as e:
        raise ClipperError(f"Could not read {source}: {e.strerror or e}") from e


def _write_output(text: str, output: Optional[Path], console: Console, quiet: bool) -> None:
    if output is None:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    if not quiet:
        console.print(f"[green]Wrote[/green] {escape(str(output))}")


def _build_options(args: argparse.Namespace) -> ClipperOptions:
    options = ClipperOptions.from_yaml_file(args.config) if args.config else ClipperOptions()
    if args.profile:
        options = apply_profile(options, ClipProfile(args.profile))
    return options.merge(
        include_metadata=args.include_metadata,
        preserve_images=args.preserve_images,
        preserve_links=args.preserve_links,
        clean_html=args.clean_html,
        selection_only=args.selection_only,
    )


def run_clip(args: argparse.Namespace, console: Console) -> int:
    """Clip a page and print or save the result."""
    try:
        options = _build_options(args)
    except ImportError:
        console.print("[red]Configuration error:[/red] YAML support requires: pip install webclipper[yaml]")
        return 1
    except (ValidationError, ValueError, OSError) as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    selection_html = _read_input(str(args.selection)) if args.selection else None
    page = PageLoader().load(args.source, url=args.url, selection_html=selection_html)

    clipper = WebClipper(options)
    # An explicit --selection-only means no fallback to the main content
    if args.selection_only:
        result = clipper.clip_selection(page)
    else:
        result = clipper.clip_page(page)

    if args.json:
        text = json.dumps(result.to_payload(), ensure_ascii=False, indent=2)
    else:
        text = result.content

    _write_output(text, args.output, console, args.quiet)
    if not args.quiet and args.output is not None:
        console.print(f"Title: {escape(result.metadata.title)}")
    return 0


def run_convert(args: argparse.Namespace, console: Console) -> int:
    """Run one of the format conversion commands."""
    text = _read_input(args.input)

    if args.command == "to-markdown":
        output = to_markdown(clean_html(text) if args.clean else text)
    elif args.command == "to-html":
        output = EDITOR_CONVERTER.convert(text) if args.editor else to_html(text)
    else:
        output = markdown_to_plain_text_preview(text, max_length=args.max_length)

    _write_output(output, args.output, console, args.quiet)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(level=level_for(args.verbose, args.quiet), log_file=args.log_file, force=True)

    try:
        if args.command == "clip":
            return run_clip(args, console)
        return run_convert(args, console)
    except ClipperError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
