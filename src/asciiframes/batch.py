from __future__ import annotations
from concurrent.futures import Executor, Future, ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type
from pathlib import Path
from .core import IMAGE_EXTENSIONS, TEXT_EXTENSION, ConversionConfig, FrameTranscoder
from .sync import purge_sources
from . import utils
from .typealiases import SomeSortOfPath, ProgressCallback, ConfigError, DiscoveryError, NamingError


__all__ = ['IMAGE_EXTENSIONS', 'Frame', 'BatchResult', 'BatchPipeline', 'discover_frames', 'check_workers']


@dataclass(frozen=True)
class Frame:
    """One source image and the text file it turns into."""

    source: Path
    output: Path

    @classmethod
    def for_source(cls, source: SomeSortOfPath, dest_dir: SomeSortOfPath) -> Frame:
        source = Path(source)
        stem = source.stem
        if not stem.strip('.'):
            raise NamingError(f'Could not derive an output name from \'{source}\'.')
        return cls(source, Path(dest_dir) / f'{stem}{TEXT_EXTENSION}')


@dataclass
class BatchResult:
    """Outcome of ``BatchPipeline.run``. ``error`` is only set when the pipeline was asked not to raise."""

    frame_count: int = 0
    outputs: List[Path] = field(default_factory=list)
    removed_sources: List[Path] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def details(self, config: ConversionConfig) -> Dict[str, Any]:
        return {'Frames': self.frame_count, **config.details()}


def discover_frames(
        src_dir: SomeSortOfPath, dest_dir: SomeSortOfPath,
        extensions: Sequence[str] = IMAGE_EXTENSIONS) -> List[Frame]:
    """**List the images of a directory as frames, in lexicographic order.**

    Only direct children with one of ``extensions`` (case-insensitive) are taken. Sorting the paths fixes the frame
    order no matter how the filesystem lists them, which is what makes zero-padded names like ``frame_0001.png``
    map to a stable sequence.

    :param src_dir: The directory holding the images.
    :param dest_dir: The directory the text files will be written to.
    :param extensions: Accepted image extensions, with the leading dot.
    :return: The frames, sorted by source path.
    """
    src_dir = Path(src_dir)
    if not src_dir.is_dir():
        raise DiscoveryError(f'The source directory \'{src_dir}\' does not exist.')
    extensions = {ext.lower() for ext in extensions}
    try:
        paths = sorted(p for p in src_dir.iterdir() if p.suffix.lower() in extensions and p.is_file())
    except OSError as e:
        raise DiscoveryError(f'Could not read the source directory \'{src_dir}\': {e}') from e
    return [Frame.for_source(p, dest_dir) for p in paths]


def check_workers(max_workers: Optional[int]) -> Optional[int]:
    """Reject a worker count the pool would refuse, before anything on disk is touched."""
    if max_workers is None:
        return None
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise ConfigError(f'The number of workers must be a positive integer, got {max_workers!r}.')
    return max_workers


def convert_single_frame(frame: Frame, config: ConversionConfig) -> Path:
    """This function is submitted to the worker pool."""
    FrameTranscoder(config).convert(frame.source, frame.output)
    return frame.output


class BatchPipeline:
    """Converts every image of a directory to a text file using a pool of worker processes.

    Frames don't depend on each other, so they are converted in parallel and finish in any order; only the set of
    files written is guaranteed. The first failure stops the batch: frames not started yet are cancelled, frames
    already running finish and keep their output, and the error is raised. Nothing is retried or rolled back.

        >>> pipeline = BatchPipeline('frames', 'frames', ConversionConfig(keep_source_images=False))
        >>> pipeline.run().frame_count
        120

    Like the rest of the multiprocessing entry points, ``run`` needs a ``if __name__ == '__main__'`` check in the
    top level of the user code.
    """

    def __init__(
            self, src_dir: SomeSortOfPath, dest_dir: SomeSortOfPath, config: Optional[ConversionConfig] = None,
            max_workers: Optional[int] = None, executor_class: Type[Executor] = ProcessPoolExecutor,
            on_progress: Optional[ProgressCallback] = None, extensions: Sequence[str] = IMAGE_EXTENSIONS) -> None:

        """**Initialize the BatchPipeline class.**

        :param src_dir: The directory holding the source images.
        :param dest_dir: The directory for the text files. Created if missing. May be ``src_dir`` itself.
        :param config: The conversion settings. Defaults to ``ConversionConfig()``.
        :param max_workers: The size of the worker pool. Defaults to the executor's own default (CPU count).
        :param executor_class: The ``concurrent.futures`` executor to use. Defaults to ``ProcessPoolExecutor``.
        :param on_progress: Called with ``(completed, total)`` after every finished frame, from the calling thread.
        :param extensions: Accepted image extensions.
        :return: ``None``.
        """

        self.src_dir = Path(src_dir)
        self.dest_dir = Path(dest_dir)
        self.config = config or ConversionConfig()
        self.max_workers = check_workers(max_workers)
        self.executor_class = executor_class
        self.on_progress = on_progress
        self.extensions = tuple(extensions)
        self.completed = 0
        self.total = 0

    def frames(self) -> List[Frame]:
        frames = discover_frames(self.src_dir, self.dest_dir, self.extensions)
        self.dest_dir.mkdir(parents=True, exist_ok=True)
        return frames

    def run(self, raise_errors: bool = True) -> BatchResult:
        """**Convert every frame and return a summary.**

        :param raise_errors: Set to False to get the first error in ``BatchResult.error`` instead of raised.
            Defaults to True.
        :return: The ``BatchResult``.
        """
        result = BatchResult()
        self.completed = 0
        try:
            frames = self.frames()
            self.total = len(frames)
            result.outputs = self._convert(frames)
            result.frame_count = len(result.outputs)
            if not self.config.keep_source_images:
                result.removed_sources = purge_sources(frame.source for frame in frames)
        except Exception as e:
            if raise_errors:
                raise
            result.frame_count = self.completed
            result.error = e
        return result

    def _convert(self, frames: List[Frame]) -> List[Path]:
        if not frames:
            return []
        utils.multiprocessing_guard()
        try:
            with self.executor_class(max_workers=self.max_workers) as executor:
                futures: List[Future] = [
                    executor.submit(convert_single_frame, frame, self.config) for frame in frames]
                try:
                    for future in as_completed(futures):
                        future.result()
                        self.completed += 1
                        if self.on_progress is not None:
                            self.on_progress(self.completed, self.total)
                except BaseException:
                    # Running frames can't be interrupted; leaving the with block waits for them.
                    for pending in futures:
                        pending.cancel()
                    raise
        finally:
            utils.release_guard()
        return sorted(frame.output for frame in frames)
