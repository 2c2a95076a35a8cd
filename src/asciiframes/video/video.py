from typing import Optional
from pathlib import Path
from ..core import ConversionConfig, FFmpeg
from ..batch import BatchPipeline, BatchResult, check_workers
from ..sync import OutputSync
from .. import utils
from ..typealiases import SomeSortOfPath, ConfirmCallback, FrameExtractor, DiscoveryError


__all__ = ['asciify', 'asciify_frames', 'write_details', 'FRAME_DIR', 'DETAILS_FILE']


FRAME_DIR = 'frame_images'
DETAILS_FILE = 'details.md'


def write_details(
        out_dir: SomeSortOfPath, result: BatchResult, config: ConversionConfig, video: bool = False) -> Path:
    """Write the ``details.md`` manifest describing a finished batch. FPS is only listed for video input."""
    details = result.details(config)
    if not video:
        details.pop('FPS', None)
    if details['Columns'] is None:
        details['Columns'] = 'original'
    path = Path(out_dir) / DETAILS_FILE
    path.write_text('\n'.join(f'{key}: {value}' for key, value in details.items()), encoding='utf-8')
    return path


def _run_batch(
        src_dir: Path, frame_dir: Path, config: ConversionConfig, max_workers: Optional[int],
        quiet: bool) -> BatchResult:
    progress = utils.ProgressPrinter(quiet=quiet)
    pipeline = BatchPipeline(src_dir, frame_dir, config, max_workers=max_workers, on_progress=progress)
    result = pipeline.run()
    progress.finish()
    return result


def asciify(
        path: SomeSortOfPath, out_dir: SomeSortOfPath = '.', config: Optional[ConversionConfig] = None,
        force: bool = False, confirm: Optional[ConfirmCallback] = None,
        extractor: FrameExtractor = FFmpeg.extract_frames, max_workers: Optional[int] = None,
        quiet: bool = False) -> Optional[BatchResult]:

    """**Convert a video to a directory of ascii art frames.**

    The frames are extracted to ``out_dir/frame_images`` as ``frame_0001.png``, ``frame_0002.png``... and each one
    is converted to a ``.txt`` file next to it. A ``details.md`` manifest is written to ``out_dir``.

    This function **needs** a ``if __name__ == "__main__"`` check in the entry point of your code, unless you are using
    interactive python on the command line.

        >>> asciify('foo.mp4', 'foo', ConversionConfig.from_preset('small'), force=True)
        [Writes foo/frame_images/frame_0001.txt... and foo/details.md]

    :param path: The path to the video file.
    :param out_dir: The output directory. Created if missing. Defaults to the current directory.
    :param config: The conversion settings. ``target_columns`` and ``fps`` are applied during extraction.
        Defaults to the ``default`` preset.
    :param force: Overwrite the frames of a previous run without asking. Defaults to False.
    :param confirm: Called with a question when a previous run would be overwritten. Returns True to proceed.
        Without it (and without ``force``) the operation is cancelled.
    :param extractor: Callable that writes the video frames to a directory. Defaults to ``FFmpeg.extract_frames``.
    :param max_workers: The number of worker processes. Defaults to the CPU count.
    :param quiet: Set to True to avoid printing progress to the console. Defaults to False.
    :return: The ``BatchResult``, or None if the operation was cancelled.
    """

    _print = utils.conditional_print(quiet)
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f'The file path \'{path}\' does not exist.')
    check_workers(max_workers)
    if config is None:
        config = ConversionConfig.from_preset('default')

    out_dir = Path(out_dir)
    frame_dir = out_dir / FRAME_DIR
    if not OutputSync(frame_dir, force=force, confirm=confirm).prepare():
        _print('Operation cancelled.')
        return None

    _print('Extracting frames...')
    extractor(path, frame_dir, config)

    result = _run_batch(frame_dir, frame_dir, config, max_workers, quiet)
    write_details(out_dir, result, config, video=True)
    _print(f'ASCII generation complete in {frame_dir}')
    return result


def asciify_frames(
        src_dir: SomeSortOfPath, out_dir: SomeSortOfPath = '.', config: Optional[ConversionConfig] = None,
        force: bool = False, confirm: Optional[ConfirmCallback] = None, max_workers: Optional[int] = None,
        quiet: bool = False) -> Optional[BatchResult]:

    """**Convert a directory of images to ascii art frames.**

    Same as ``asciify`` for images that are already on disk: every image of ``src_dir`` (sorted by name) becomes a
    ``.txt`` file in ``out_dir/frame_images``. The images in ``src_dir`` are only deleted if the config says so.

    :param src_dir: The directory holding the images.
    :param out_dir: The output directory. Created if missing. Defaults to the current directory.
    :param config: The conversion settings. Defaults to ``ConversionConfig()``, which keeps the image width.
    :param force: Overwrite the frames of a previous run without asking. Defaults to False.
    :param confirm: Called with a question when a previous run would be overwritten. Returns True to proceed.
    :param max_workers: The number of worker processes. Defaults to the CPU count.
    :param quiet: Set to True to avoid printing progress to the console. Defaults to False.
    :return: The ``BatchResult``, or None if the operation was cancelled.
    """

    _print = utils.conditional_print(quiet)
    src_dir = Path(src_dir)
    if not src_dir.is_dir():
        raise DiscoveryError(f'The source directory \'{src_dir}\' does not exist.')
    check_workers(max_workers)
    config = config or ConversionConfig()

    out_dir = Path(out_dir)
    frame_dir = out_dir / FRAME_DIR
    same_dir = frame_dir.is_dir() and src_dir.resolve() == frame_dir.resolve()
    sync = OutputSync(frame_dir, force=force, confirm=confirm, include_images=not same_dir, src_dir=src_dir)
    if not sync.prepare():
        _print('Operation cancelled.')
        return None

    result = _run_batch(src_dir, frame_dir, config, max_workers, quiet)
    write_details(out_dir, result, config)
    _print(f'ASCII generation complete in {frame_dir}')
    return result
