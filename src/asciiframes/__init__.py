"""
:Version: 0.1.0

asciiframes
===========

Turn videos and directories of images into ASCII art frames, one text file per image.

`asciiframes` converts every frame to plain monospace text: a grid with one character per pixel, picked from a ramp
of glyphs going from the darkest to the lightest. The frames are converted in parallel and written next to each
other, ready to be played back by any viewer that can print text files in order.

Basic Usage
-----------

Use the corresponding function depending on your use case:

- ``image.asciify()`` converts one image. The ASCII art is returned as a string and optionally saved in a txt.

- ``video.asciify()`` extracts the frames of a video with FFmpeg and converts all of them.

- ``video.asciify_frames()`` converts a directory of images that is already on disk.

The first argument is always the **path** of the input. The rest of the arguments have **default values**, and
the batch settings are grouped in a ``ConversionConfig``:

    >>> import asciiframes as af
    >>> af.image.asciify('foo.png', definition=80)

    >>> config = af.ConversionConfig.from_preset('small', luminance_threshold=10)
    >>> af.video.asciify('foo.mp4', 'foo', config)

The video functions write ``frame_0001.txt``, ``frame_0002.txt``... to ``<out>/frame_images`` and a ``details.md``
manifest to ``<out>``. Running them again on the same output asks before deleting the previous frames (pass
``force=True`` to skip the question).

It is important to note that the **video** functions and ``BatchPipeline`` **require** a
``if __name__ == '__main__'`` check in the top level of the user code (_unless_ you are using interactive python on
the command line). This is because the library uses **multiprocessing** to speed up frame generation.

The most important **parameters** to play around with are the number of **columns**, the **font ratio** (how much
the image is squashed vertically to make up for tall character cells) and the **luminance threshold** (pixels
darker than it are left blank).
"""

from . import image, video
from .core import *
from .batch import *
from .sync import *
from .typealiases import (
    AsciiFramesException, ConfigError, DecodeError, WriteError, DiscoveryError, NamingError, ExtractError)


__version__ = '0.1.0'
