from typing import Optional
from ..core import DEFAULT_RAMP, ConversionConfig, FrameTranscoder, GlyphRamp
from .. import utils
from ..typealiases import SomeSortOfPath, OptionalWidth


__all__ = ['asciify']


def asciify(
        path: SomeSortOfPath, definition: OptionalWidth = None, correction: float = 0.5, threshold: int = 1,
        chars: str = str(DEFAULT_RAMP), reverse_chars: bool = False, config: Optional[ConversionConfig] = None,
        save_txt: bool = False) -> str:

    """**Convert an image to ascii art.**

        >>> asciify('foo.png', definition=120)
        [Returns the ascii art string, 120 characters wide]

        >>> asciify('foo.png', save_txt=True)
        [Saves the ascii art as foo.txt (or foo2.txt, foo3.txt... if taken) and returns it]

    :param path: The path to the image file.
    :param definition: The number of characters in the horizontal axis. Defaults to the image width.
    :param correction: The factor of compensation for the non-square nature of an ascii character. A value between
        zero and one shrinks the input image height. This is generally what we want. Defaults to 0.5.
    :param threshold: Pixels with a luminance (0-255) below this are left blank. Defaults to 1.
    :param chars: The string of characters to be used in the ascii art. Any length of at least two is accepted, but
        the characters should be in dimmest to brightest order. Defaults to ``DEFAULT_RAMP``.
    :param reverse_chars: Whether to reverse the chars order, in case it's dark text on light background.
        Defaults to False.
    :param config: A ready-made ``ConversionConfig``. When given, the parameters above are ignored, but
        ``definition`` still overrides its columns.
    :param save_txt: Whether to save the ascii art in a text file. Will be saved in the same directory as the input
        image, without overwriting anything. Defaults to False.
    :return: The ascii art as a string.
    """

    if config is None:
        ramp = GlyphRamp(chars)
        config = ConversionConfig(
            target_columns=definition, font_aspect_ratio=correction, luminance_threshold=threshold,
            ramp=ramp.reversed() if reverse_chars else ramp)

    transcoder = FrameTranscoder(config)
    if save_txt:
        return transcoder.convert(path, utils.safe_path(path, ext='txt', as_path_obj=True), definition)
    return transcoder.transcode(path, definition)
