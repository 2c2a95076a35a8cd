from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence, Tuple

import pytest
from PIL import Image


def save_image(path: Path, size: Tuple[int, int], color=(255, 255, 255), mode: str = 'RGB') -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


def save_pixels(path: Path, rows: Sequence[Sequence[Tuple[int, int, int]]]) -> Path:
    """Save an RGB image given as rows of pixels."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new('RGB', (len(rows[0]), len(rows)))
    img.putdata([pixel for row in rows for pixel in row])
    img.save(path)
    return path


def save_gradient(path: Path, size: Tuple[int, int] = (16, 8), seed: int = 0) -> Path:
    w, h = size
    rows = [[((x * 16 + seed * 7) % 256, (y * 32 + seed * 13) % 256, (x * y + seed) % 256) for x in range(w)]
            for y in range(h)]
    return save_pixels(path, rows)


@pytest.fixture
def make_image() -> Callable[..., Path]:
    return save_image


@pytest.fixture
def frames_dir(tmp_path: Path) -> Path:
    """A directory with five gradient frames named like the FFmpeg output."""
    directory = tmp_path / 'frames'
    for k in range(1, 6):
        save_gradient(directory / f'frame_{k:04d}.png', seed=k)
    return directory
