"""ntscj-tool — recolour images authored in the NTSC-J gamut for sRGB displays, or back.

Usage: ntscj-tool <mode> <input> <output> [options]

Modes:
  ntscj-to-srgb   pixels were authored for NTSC-J but are tagged sRGB
  srgb-to-ntscj   the reverse

Dither strategies are auto-discovered from ntscj_tool/dithers/.
Each strategy module's docstring is its documentation.
Run `ntscj-tool help <dither>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, ntscj-tool looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import sys

from ntscj_tool import __version__, registry
from ntscj_tool.core.codec import CodecError
from ntscj_tool.core.env import ENV_CURVE, ENV_DITHER, ENV_WORKERS, Settings, load_env
from ntscj_tool.core.gamma import CURVES
from ntscj_tool.core.gamut import Direction
from ntscj_tool.core.pipeline import convert_file
from ntscj_tool.core.report import format_json, format_text

_MODE_HELP = {
    Direction.NTSCJ_TO_SRGB: 'Remap NTSC-J authored pixels to the sRGB gamut.',
    Direction.SRGB_TO_NTSCJ: 'Remap sRGB pixels to the NTSC-J gamut.',
}


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f'not an integer: {text!r}') from None
    if value < 1:
        raise argparse.ArgumentTypeError(f'must be at least 1: {value}')
    return value


def _short_doc(name: str) -> str:
    doc = (registry.module_for(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else registry.get(name).help


def _build_parser() -> argparse.ArgumentParser:
    dithers = registry.all_dithers()

    epilog = (
        'Examples:\n'
        '  ntscj-tool ntscj-to-srgb texture.png fixed.png\n'
        '  ntscj-tool ntscj-to-srgb texture.png fixed.png --dither ordered\n'
        '  ntscj-tool srgb-to-ntscj photo.png retro.png --workers 4 --json\n'
        '  ntscj-tool help quasirandom\n'
        '\n'
        'Config env vars (set in .env or environment):\n'
        f'  {ENV_DITHER}   default for --dither\n'
        f'  {ENV_CURVE}    default for --curve\n'
        f'  {ENV_WORKERS}  default for --workers\n'
    )
    parser = argparse.ArgumentParser(
        prog='ntscj-tool',
        description='Recolour images between the NTSC-J and sRGB gamuts.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='mode', help='Conversion direction')

    for direction in Direction:
        p = sub.add_parser(direction.value, help=_MODE_HELP[direction])
        p.add_argument('input', help='Path to the source image')
        p.add_argument('output', help='Path to write the converted RGBA image')
        p.add_argument(
            '-d',
            '--dither',
            choices=sorted(dithers),
            default=None,
            help=f'Requantization strategy (default: {registry.DEFAULT_DITHER})',
        )
        p.add_argument(
            '-c',
            '--curve',
            choices=sorted(CURVES),
            default=None,
            help='Transfer curve: piecewise sRGB or pure 2.2 power (default: srgb)',
        )
        p.add_argument(
            '-w',
            '--workers',
            type=_positive_int,
            default=None,
            metavar='N',
            help='Worker threads for stateless dithers (default: 1)',
        )
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')

    # `help` subcommand prints full module docstring for a dither strategy
    help_parser = sub.add_parser('help', help='Print full docs for a dither strategy')
    help_parser.add_argument('command', nargs='?', help='Dither name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a dither strategy."""
    dithers = registry.all_dithers()

    if command is None:
        print('Available dither strategies:\n')
        for name in sorted(dithers):
            print(f'  {name:<16} {_short_doc(name)}')
        print('\nRun: ntscj-tool help <dither> for full docs.')
        return

    if command not in dithers:
        print(f'Unknown dither: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(dithers))}', file=sys.stderr)
        sys.exit(1)

    doc = (registry.module_for(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Load .env before anything else; OS env vars always win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'ntscj-tool: loaded {env_path}', file=sys.stderr)

    if not args.mode:
        parser.print_help(sys.stderr)
        sys.exit(1)

    if args.mode == 'help':
        _print_help(args.command)
        return

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f'ntscj-tool: {e}', file=sys.stderr)
        sys.exit(1)

    dither = args.dither or settings.dither
    curve = args.curve or settings.curve
    workers = args.workers or settings.workers

    print(f'ntscj-tool: converting {args.input} ({args.mode}) -> {args.output}', file=sys.stderr)
    try:
        report = convert_file(args.input, args.output, args.mode, dither=dither, curve=curve, workers=workers)
    except (CodecError, ValueError) as e:
        print(f'ntscj-tool: {e}', file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))


if __name__ == '__main__':
    main()
