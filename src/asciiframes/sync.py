from __future__ import annotations
import re
from contextlib import suppress
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional, Set
from .core import FRAME_PREFIX, IMAGE_EXTENSIONS, TEXT_EXTENSION
from .typealiases import SomeSortOfPath, ConfirmCallback


__all__ = ['OutputSync', 'purge_sources']


class OutputSync:
    """Makes re-running a conversion against the same output directory predictable.

    Leftovers of a previous run are the extracted ``frame_NNNN`` images and the text files named after a frame or
    after an image of the destination or ``src_dir``. Mixing them with a new run (say, one with fewer columns) would
    leave a directory where frames disagree, so they are removed up front, but only once the user agreed to it. Any
    other file in the directory is left alone.

        >>> sync = OutputSync('out/frame_images', confirm=lambda message: input(message) == 'y')
        >>> if not sync.prepare():
        ...     print('Operation cancelled.')
    """

    def __init__(
            self, dest_dir: SomeSortOfPath, force: bool = False, confirm: Optional[ConfirmCallback] = None,
            prefix: str = FRAME_PREFIX, include_images: bool = True,
            src_dir: Optional[SomeSortOfPath] = None) -> None:
        self.dest_dir = Path(dest_dir)
        self.src_dir = Path(src_dir) if src_dir is not None else None
        self.force = force
        self.confirm = confirm
        self.include_images = include_images
        self.frame_name = re.compile(rf'^{re.escape(prefix)}\d+$')

    def image_stems(self) -> Set[str]:
        """Stems of the images a text output can be named after, in the destination and the source directory."""
        stems = set()
        for directory in (self.dest_dir, self.src_dir):
            if directory is not None and directory.is_dir():
                stems.update(p.stem for p in directory.iterdir() if p.suffix.lower() in IMAGE_EXTENSIONS)
        return stems

    def is_artifact(self, path: Path, image_stems: AbstractSet[str] = frozenset()) -> bool:
        suffix = path.suffix.lower()
        if suffix == TEXT_EXTENSION:
            return bool(self.frame_name.match(path.stem)) or path.stem in image_stems
        # Set include_images to False when the destination doubles as the input directory.
        return self.include_images and suffix in IMAGE_EXTENSIONS and bool(self.frame_name.match(path.stem))

    def artifacts(self) -> List[Path]:
        """The files a previous run left in the destination directory, sorted."""
        if not self.dest_dir.is_dir():
            return []
        stems = self.image_stems()
        return sorted(p for p in self.dest_dir.iterdir() if p.is_file() and self.is_artifact(p, stems))

    def prepare(self) -> bool:
        """**Get the destination directory ready for a new run.**

        Creates the directory. If it holds artifacts of a previous run, they are deleted when ``force`` is set or
        ``confirm`` returns True. Otherwise nothing is touched.

        :return: False if the overwrite was declined and the run should be cancelled, True otherwise.
        """
        artifacts = self.artifacts()
        if artifacts:
            message = f'Directory {self.dest_dir} already contains {len(artifacts)} generated files. Overwrite?'
            if not (self.force or (self.confirm is not None and self.confirm(message))):
                return False
            for path in artifacts:
                path.unlink()
        self.dest_dir.mkdir(parents=True, exist_ok=True)
        return True


def purge_sources(paths: Iterable[SomeSortOfPath]) -> List[Path]:
    """Delete converted source images. Files already gone are skipped. Returns the paths that were removed."""
    removed = []
    for path in paths:
        path = Path(path)
        with suppress(FileNotFoundError):
            path.unlink()
            removed.append(path)
    return removed
