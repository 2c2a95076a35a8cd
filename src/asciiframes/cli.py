"""Command line interface: ``asciiframes [input] [out] [options]``.

Without a quality preset the command asks for every setting that wasn't passed (when run from a terminal) and
before overwriting a previous run. With ``--default``, ``--small`` or ``--large`` it never asks: the input path is
required and previous runs are overwritten.
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import argparse
import sys
from pathlib import Path
from .core import IMAGE_EXTENSIONS, PRESETS, RAMPS, ConversionConfig, GlyphRamp
from . import utils, video
from .typealiases import AsciiFramesException


MEDIA_EXTENSIONS = ('.mp4', '.mkv', '.mov', '.avi', '.webm') + IMAGE_EXTENSIONS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='asciiframes', description='Interactive video/image to ASCII frame generator.')
    parser.add_argument('input', nargs='?', type=Path, help='Input video file or directory of images')
    parser.add_argument('out', nargs='?', type=Path, default=Path('.'),
                        help='Output directory for the generated files (default: current directory)')
    parser.add_argument('--columns', type=int, help='Target columns for scaling (width)')
    parser.add_argument('--fps', type=int, help='Frames per second when extracting from video')
    parser.add_argument('--font-ratio', type=float, help='Font aspect ratio (character width:height)')
    parser.add_argument('--luminance', type=int,
                        help='Luminance threshold (0-255) for what is considered transparent')
    presets = parser.add_mutually_exclusive_group()
    presets.add_argument('--default', dest='preset', action='store_const', const='default',
                         help='Use default quality preset')
    presets.add_argument('-s', '--small', dest='preset', action='store_const', const='small',
                         help='Use smaller default values for quality settings')
    presets.add_argument('-l', '--large', dest='preset', action='store_const', const='large',
                         help='Use larger default values for quality settings')
    parser.add_argument('--ramp', choices=list(RAMPS), default='default', help='Character ramp (default: default)')
    parser.add_argument('--reverse', action='store_true', help='Reverse the ramp, for dark text on light background')
    parser.add_argument('--no-keep-images', dest='keep_images', action='store_false',
                        help='Delete the source images once every frame is converted')
    parser.add_argument('-y', '--yes', action='store_true', help='Overwrite a previous run without asking')
    parser.add_argument('-w', '--workers', type=int, help='Number of worker processes (default: CPU count)')
    parser.add_argument('-q', '--quiet', action='store_true', help='Do not print progress')
    return parser


def find_media_files(directory: Path = Path('.')) -> List[Path]:
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in MEDIA_EXTENSIONS)


def choose_input(directory: Path = Path('.')) -> Path:
    files = find_media_files(directory)
    if not files:
        raise AsciiFramesException('No media files found in current directory.')
    for k, path in enumerate(files, 1):
        print(f'{k:>3}. {path.name}')
    while True:
        index = utils.prompt('Choose an input file', 1, int)
        if 1 <= index <= len(files):
            return files[index - 1]
        print(f'Choose a number between 1 and {len(files)}.')


def resolve_config(args: argparse.Namespace, interactive: bool) -> ConversionConfig:
    """Fill in the settings that weren't passed, asking for them when interactive."""
    preset = PRESETS[args.preset or 'interactive']
    columns, fps, font_ratio, luminance = args.columns, args.fps, args.font_ratio, args.luminance
    if interactive:
        if columns is None:
            columns = utils.prompt('Columns (width)', preset['target_columns'], int)
        if fps is None and args.input.is_file():
            fps = utils.prompt('Frames per second (FPS)', preset['fps'], int)
        if font_ratio is None:
            font_ratio = utils.prompt('Font Ratio', preset['font_aspect_ratio'], float)
        if luminance is None:
            luminance = utils.prompt('Luminance threshold', 1, int)

    ramp = GlyphRamp.named(args.ramp)
    return ConversionConfig.from_preset(
        args.preset or 'interactive', target_columns=columns, fps=fps, font_aspect_ratio=font_ratio,
        luminance_threshold=luminance, keep_source_images=args.keep_images,
        ramp=ramp.reversed() if args.reverse else ramp)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    interactive = args.preset is None and sys.stdin.isatty()
    force = args.yes or args.preset is not None
    confirm = None if force else utils.confirm

    try:
        if args.input is None:
            if not interactive:
                raise AsciiFramesException(
                    'An input path is required when using a preset or when not run from a terminal.')
            args.input = choose_input()
        config = resolve_config(args, interactive)

        if args.input.is_file():
            result = video.asciify(
                args.input, args.out, config, force=force, confirm=confirm, max_workers=args.workers,
                quiet=args.quiet)
        elif args.input.is_dir():
            result = video.asciify_frames(
                args.input, args.out, config, force=force, confirm=confirm, max_workers=args.workers,
                quiet=args.quiet)
        else:
            raise AsciiFramesException(f'Input path \'{args.input}\' does not exist.')
    except (AsciiFramesException, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    if result is not None and not args.quiet:
        print(f'Frames: {result.frame_count}')
    return 0
