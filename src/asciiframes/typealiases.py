from typing import Union, Callable, Optional, Tuple
from os import PathLike
from pathlib import Path

SomeSortOfPath = Union[str, PathLike, Path]
Number = Union[int, float]
Pixel = Tuple[int, int, int]

ProgressCallback = Callable[[int, int], None]
ConfirmCallback = Callable[[str], bool]
FrameExtractor = Callable[[SomeSortOfPath, SomeSortOfPath, 'ConversionConfig'], None]
OptionalWidth = Optional[int]


class AsciiFramesException(Exception):
    pass


class ConfigError(AsciiFramesException, ValueError):
    pass


class DecodeError(AsciiFramesException):
    pass


class WriteError(AsciiFramesException):
    pass


class DiscoveryError(AsciiFramesException):
    pass


class NamingError(AsciiFramesException):
    pass


class ExtractError(AsciiFramesException):
    pass
