"""palette-tool — Extract the dominant, actually-occurring colours from an image.

Usage: uv run palette-tool <technique> <tmp_dir> <image> [options]

Techniques are auto-discovered from palette_tool/techniques/ and each
module docstring doubles as its help text:
`palette-tool help <technique>` prints it in full.

Tuning:
  PALETTE_* variables (see palette_tool/core/config.py) come from the OS
  environment first, then from a .env file: --env-file if given, otherwise
  the nearest .env walking up from cwd, stopping at the .git boundary.
  --seed and --max-side override the environment.
"""

import argparse
import importlib
import os
import sys
from typing import NoReturn

from loguru import logger

from palette_tool import registry
from palette_tool.core.config import ExtractionConfig
from palette_tool.core.env import load_env
from palette_tool.core.errors import PaletteError
from palette_tool.core.image_io import load_pixel_buffer
from palette_tool.core.report import format_json, format_text
from palette_tool.core.types import ImageJob, Report

EPILOG = """\
Examples:
  palette-tool extract ./tmp photo.jpg
  palette-tool extract ./tmp photo.jpg --seed 7 --json
  palette-tool all ./tmp photo.jpg --json
  palette-tool background ./tmp logo.png
  palette-tool swatch ./tmp photo.jpg
  palette-tool help extract

Pipeline env vars (set in .env or environment):
  PALETTE_SEED, PALETTE_MAX_SIDE, PALETTE_QUANT_STEP,
  PALETTE_MERGE_DELTA, PALETTE_MIN_PERCENT, PALETTE_MAX_ITERATIONS
"""


def _module_doc(name: str) -> str:
    return (importlib.import_module(f'palette_tool.techniques.{name}').__doc__ or '').strip()


def _summary(name: str) -> str:
    """First docstring line of a technique module, falling back to its help string."""
    doc = _module_doc(name)
    return doc.splitlines()[0] if doc else registry.get(name).help


def _add_image_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument('tmp_dir', help='Working directory for artefacts')
    p.add_argument('image', help='Path to an image file (PNG/JPG/WebP/...)')
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
    p.add_argument('-s', '--seed', type=int, default=None, help='Seed for k-means++ (reproducible output)')
    p.add_argument(
        '-m',
        '--max-side',
        type=int,
        default=None,
        metavar='N',
        help='Downscale so the longest side is at most N pixels (default: 600)',
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='palette-tool',
        description='Extract the dominant, actually-occurring colours from an image.',
        epilog=EPILOG,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log pipeline stages to stderr')
    sub = parser.add_subparsers(dest='technique', help='Technique to run')

    for name in sorted(registry.all_techniques()):
        _add_image_arguments(sub.add_parser(name, help=_summary(name)))

    help_parser = sub.add_parser('help', help='Print full docs for a technique')
    help_parser.add_argument('command', nargs='?', help='Technique name')
    return parser


def _print_help(command: str | None) -> None:
    techniques = registry.all_techniques()
    if command is None:
        print('Available techniques:\n')
        for name in sorted(techniques):
            print(f'  {name:<12} {_summary(name)}')
        print('\nRun: palette-tool help <technique> for full docs.')
        return

    if command not in techniques:
        print(f'Unknown technique: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(techniques))}', file=sys.stderr)
        sys.exit(1)
    print(_module_doc(command) or f'(No module docs for {command!r})')


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level='DEBUG' if verbose else 'WARNING', format='{time:HH:mm:ss} | {level} | {message}')


def _fail(message: str) -> NoReturn:
    print(f'Error: {message}', file=sys.stderr)
    sys.exit(1)


def _run_technique(args: argparse.Namespace) -> Report:
    """Load the image named on the command line and run one technique over it."""
    try:
        args.config = ExtractionConfig.from_env(seed=args.seed, max_side=args.max_side)
    except ValueError as e:
        _fail(str(e))

    if not os.path.isfile(args.image):
        _fail(f'image not found: {args.image}')
    try:
        buffer, original_size = load_pixel_buffer(args.image, args.config.max_side)
    except PaletteError as e:
        _fail(e.message)

    report = Report(
        image_path=args.image,
        image_width=buffer.width,
        image_height=buffer.height,
        original_size=original_size,
    )
    job = ImageJob(path=args.image, buffer=buffer, original_size=original_size)
    registry.get(args.technique).execute(job, report, args)
    return report


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    _configure_logging(args.verbose)

    # OS env vars always win over .env
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'palette-tool: loaded {env_path}', file=sys.stderr)

    if not args.technique:
        parser.print_help()
        sys.exit(1)
    if args.technique == 'help':
        _print_help(args.command)
        return

    report = _run_technique(args)
    print(format_json(report) if args.json else format_text(report))

    # Exit status after output so the report is visible even on failure
    if report.failed:
        for err in report.errors:
            print(f'Error: {err["message"]}', file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
