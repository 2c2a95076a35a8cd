from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union
import os
import math
import tempfile
from contextlib import suppress
from dataclasses import dataclass, replace
from pathlib import Path
from PIL import Image
from . import utils
from .typealiases import (
    SomeSortOfPath, Pixel, OptionalWidth, ConfigError, DecodeError, WriteError, ExtractError)


__all__ = [
    'GlyphRamp', 'DEFAULT_RAMP', 'RAMPS', 'PRESETS', 'ConversionConfig', 'GlyphMapper', 'FrameTranscoder', 'FFmpeg']


ffmpeg = 'ffmpeg'

FRAME_PREFIX = 'frame_'
FRAME_PATTERN = f'{FRAME_PREFIX}%04d.png'
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.webp')
TEXT_EXTENSION = '.txt'


@dataclass(frozen=True)
class GlyphRamp:
    """An ordered palette of characters, darkest first. The order is the only contract: index 0 is used for the
    dimmest pixels that pass the threshold and the last index for pure white.

        >>> ramp = GlyphRamp(' .#')
        >>> ramp[0], ramp[-1], len(ramp)
        (' ', '#', 3)
    """

    chars: str

    def __post_init__(self) -> None:
        if not isinstance(self.chars, str) or len(self.chars) < 2:
            raise ConfigError(f'A glyph ramp needs at least two characters, got {self.chars!r}.')

    def __len__(self) -> int:
        return len(self.chars)

    def __getitem__(self, index: int) -> str:
        return self.chars[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.chars)

    def __str__(self) -> str:
        return self.chars

    def reversed(self) -> GlyphRamp:
        """Lightest first. Use it for dark text on a light background."""
        return GlyphRamp(self.chars[::-1])

    @staticmethod
    def named(name: str) -> GlyphRamp:
        try:
            return RAMPS[name]
        except KeyError:
            raise KeyError(f'Unknown ramp {name!r}. Choose one of: {", ".join(RAMPS)}.') from None


DEFAULT_RAMP = GlyphRamp(" .`'^,:;Il!i><~+_-?][}{1)(|/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$")

RAMPS: Dict[str, GlyphRamp] = {
    'default': DEFAULT_RAMP,
    'standard': GlyphRamp(' .:-=+*#%@'),
    'simple': GlyphRamp(' .:-=+*$@#'),
    'blocks': GlyphRamp(' ▏▎▍▌▋▊▉█'),
    'shades': GlyphRamp(' ░▒▓█'),
}

# Quality presets: columns, frames per second and font ratio.
PRESETS: Dict[str, Dict[str, Any]] = {
    'small': {'target_columns': 80, 'fps': 24, 'font_aspect_ratio': 0.44},
    'default': {'target_columns': 200, 'fps': 24, 'font_aspect_ratio': 0.5},
    'large': {'target_columns': 800, 'fps': 60, 'font_aspect_ratio': 0.7},
    'interactive': {'target_columns': 800, 'fps': 30, 'font_aspect_ratio': 0.7},
}


@dataclass(frozen=True)
class ConversionConfig:
    """**Settings shared by every frame of a batch.** Immutable, so it can be pickled once per task and handed to the
    worker processes.

    :param target_columns: The number of characters in the horizontal axis. ``None`` keeps the image width, which is
        what you want when the frames were already scaled during extraction.
    :param font_aspect_ratio: The factor of compensation for the non-square nature of a monospace character cell.
        The image height is multiplied by it before rendering. Defaults to 0.5.
    :param luminance_threshold: Pixels darker than this (0-255) become spaces. Defaults to 1.
    :param keep_source_images: Set to False to delete the converted images after a fully successful batch.
        Defaults to True.
    :param ramp: The characters in dimmest to brightest order. Accepts a plain string. Defaults to
        ``DEFAULT_RAMP``.
    :param fps: Frames per second. Only used when extracting frames from a video and in the details manifest.
    """

    target_columns: Optional[int] = None
    font_aspect_ratio: float = 0.5
    luminance_threshold: int = 1
    keep_source_images: bool = True
    ramp: GlyphRamp = DEFAULT_RAMP
    fps: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.ramp, str):
            object.__setattr__(self, 'ramp', GlyphRamp(self.ramp))
        elif not isinstance(self.ramp, GlyphRamp):
            raise ConfigError(f'Invalid glyph ramp: {self.ramp!r}.')
        if self.target_columns is not None and (
                not isinstance(self.target_columns, int) or self.target_columns < 1):
            raise ConfigError(f'Target columns must be a positive integer, got {self.target_columns!r}.')
        if not (isinstance(self.font_aspect_ratio, (int, float)) and math.isfinite(self.font_aspect_ratio)
                and self.font_aspect_ratio > 0):
            raise ConfigError(f'Font aspect ratio must be greater than zero, got {self.font_aspect_ratio!r}.')
        if not isinstance(self.luminance_threshold, int) or not 0 <= self.luminance_threshold <= 255:
            raise ConfigError(f'Luminance threshold must be between 0 and 255, got {self.luminance_threshold!r}.')
        if self.fps is not None and (not isinstance(self.fps, int) or self.fps < 1):
            raise ConfigError(f'FPS must be a positive integer, got {self.fps!r}.')

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> ConversionConfig:
        """Build a config from one of ``PRESETS``. Overrides set to ``None`` are ignored, so parsed command line
        arguments can be passed straight through."""
        try:
            values = dict(PRESETS[name])
        except KeyError:
            raise ConfigError(f'Unknown preset {name!r}. Choose one of: {", ".join(PRESETS)}.') from None
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def evolve(self, **changes: Any) -> ConversionConfig:
        return replace(self, **changes)

    def details(self) -> Dict[str, Any]:
        """The values reported next to the frame count in the details manifest."""
        resp = {
            'Luminance': self.luminance_threshold,
            'Font Ratio': self.font_aspect_ratio,
            'Columns': self.target_columns,
        }
        if self.fps is not None:
            resp['FPS'] = self.fps
        return resp


class GlyphMapper:
    """Maps pixel colors to glyphs of a given ramp."""

    def __init__(self, ramp: Union[GlyphRamp, str] = DEFAULT_RAMP) -> None:
        self.ramp = GlyphRamp(ramp) if isinstance(ramp, str) else ramp
        self._tables: Dict[int, List[str]] = {}

    @staticmethod
    def luminance(pixel: Sequence[int]) -> int:
        """Perceptual brightness of an RGB pixel with the BT.709 luma coefficients, rounded and kept in 0-255."""
        r, g, b = pixel[0], pixel[1], pixel[2]
        return min(255, max(0, utils.round_half_up(0.2126 * r + 0.7152 * g + 0.0722 * b)))

    def glyph_for(self, luma: int, threshold: int) -> str:
        """**Pick the glyph for a luminance value.**

        Values below ``threshold`` are transparent and become a space. The rest are spread over the whole ramp:
        ``threshold`` maps to the first glyph and 255 to the last one. A threshold of 255 leaves no range to spread
        over, so only a luminance of exactly 255 passes and it maps to the lightest glyph. A ramp that starts with a
        space, like ``DEFAULT_RAMP``, also leaves the lowest band at or above the threshold blank.

        :param luma: The luminance (0-255).
        :param threshold: The luminance threshold (0-255).
        :return: A single character.
        """
        if luma < threshold:
            return ' '
        last = len(self.ramp) - 1
        if threshold >= 255:
            return self.ramp[last]
        scaled = (luma - threshold) / (255 - threshold) * last
        return self.ramp[int(min(max(scaled, 0.0), last))]

    def table(self, threshold: int) -> List[str]:
        """The glyph of every luminance value from 0 to 255 for a fixed threshold. Computed once per threshold."""
        if threshold not in self._tables:
            self._tables[threshold] = [self.glyph_for(luma, threshold) for luma in range(256)]
        return self._tables[threshold]

    def render_row(self, pixels: Iterable[Pixel], threshold: int) -> str:
        """One line of text for a row of pixels, without the line break."""
        table = self.table(threshold)
        return ''.join(table[self.luminance(pixel)] for pixel in pixels)


class FrameTranscoder:
    """Turns one image file into one text file. Holds no state besides the config, so the same transcoder can be
    used for any number of frames, in any order.

        >>> transcoder = FrameTranscoder(ConversionConfig(font_aspect_ratio=0.5))
        >>> transcoder.convert('frame_0001.png', 'frame_0001.txt')
        [Writes the ascii art and returns it as a string]
    """

    def __init__(self, config: Optional[ConversionConfig] = None) -> None:
        self.config = config or ConversionConfig()
        self.mapper = GlyphMapper(self.config.ramp)

    def decode(self, path: SomeSortOfPath) -> Image.Image:
        """Open an image and convert it to RGB. Raises ``DecodeError`` if the file can't be read or parsed."""
        try:
            with Image.open(path) as img:
                return img.convert('RGB')
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            raise DecodeError(f'Could not decode \'{path}\': {e}') from e

    def resize(self, img: Image.Image, width: OptionalWidth = None) -> Image.Image:
        """Scale the image to ``width`` columns (keeping proportions), then squash it vertically by the font aspect
        ratio. Both steps use the triangle filter and are skipped when they wouldn't change the size.

        :param img: The decoded image.
        :param width: The number of columns. Defaults to ``config.target_columns``, or the image width.
        :return: The resized image.
        """
        width = width if width is not None else self.config.target_columns
        if width is not None and width < 1:
            raise ConfigError(f'Width must be a positive integer, got {width!r}.')
        w, h = img.size
        if width is not None and width != w:
            h = max(1, utils.round_half_up(h * width / w))
            w = width
            img = img.resize((w, h), Image.Resampling.BILINEAR)
        new_h = max(1, utils.round_half_up(h * self.config.font_aspect_ratio))
        if new_h != h:
            img = img.resize((w, new_h), Image.Resampling.BILINEAR)
        return img

    def render(self, img: Image.Image) -> str:
        """One line per pixel row, one character per pixel column. Every line ends with a line break."""
        threshold = self.config.luminance_threshold
        px = img.load()
        w, h = img.size
        rows = []
        for y in range(h):
            rows.append(self.mapper.render_row((px[x, y] for x in range(w)), threshold))
            rows.append('\n')
        return ''.join(rows)

    def transcode(self, path: SomeSortOfPath, width: OptionalWidth = None) -> str:
        """Decode, resize and render an image without writing anything."""
        return self.render(self.resize(self.decode(path), width))

    def write(self, text: str, out_path: SomeSortOfPath) -> None:
        """Write the text in one go: a temporary file next to the target is renamed over it, so readers never see a
        half-written frame. Raises ``WriteError``."""
        out_path = Path(out_path)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                    'w', encoding='utf-8', newline='\n', dir=out_path.parent,
                    prefix=f'.{out_path.stem}.', suffix='.tmp', delete=False) as f:
                tmp_name = f.name
                f.write(text)
            os.replace(tmp_name, out_path)
        except OSError as e:
            if tmp_name is not None:
                with suppress(OSError):
                    os.unlink(tmp_name)
            raise WriteError(f'Could not write \'{out_path}\': {e}') from e

    def convert(self, path: SomeSortOfPath, out_path: SomeSortOfPath, width: OptionalWidth = None) -> str:
        """**Convert an image file to an ascii art text file.**

        :param path: The path to the image file.
        :param out_path: The path of the text file. Overwritten if it exists.
        :param width: Optional number of columns, overriding ``config.target_columns``.
        :return: The ascii art as a string.
        """
        text = self.transcode(path, width)
        self.write(text, out_path)
        return text


class FFmpeg:
    """Class with static functions wrapping the FFmpeg commands used to feed the batch pipeline."""

    @staticmethod
    def extract_frames(path: SomeSortOfPath, out_dir: SomeSortOfPath, config: ConversionConfig) -> None:
        """Save the frames of a video as ``frame_0001.png``, ``frame_0002.png``... in ``out_dir``, scaled to
        ``config.target_columns`` pixels wide and sampled at ``config.fps``."""
        filters = []
        if config.target_columns is not None:
            filters.append(f'scale={config.target_columns}:-2')
        if config.fps is not None:
            filters.append(f'fps={config.fps}')
        args = ['-loglevel', 'error', '-i', str(path)]
        if filters:
            args += ['-vf', ','.join(filters)]
        args.append(str(Path(out_dir) / FRAME_PATTERN))
        try:
            code, stderr = utils.run(ffmpeg, *args, get_stderr=True)
        except OSError as e:
            raise ExtractError(f'Could not run {ffmpeg}: {e}') from e
        if code:
            raise ExtractError(f'{ffmpeg} could not extract frames from \'{path}\': {stderr or "unknown error"}')
