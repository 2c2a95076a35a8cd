"""Tests for the single image entry point."""

from __future__ import annotations

from pathlib import Path

from asciiframes import image
from asciiframes.core import ConversionConfig

from conftest import save_gradient, save_pixels


def test_asciify_returns_text_without_writing(tmp_path: Path) -> None:
    src = save_gradient(tmp_path / 'foo.png', (20, 10))

    text = image.asciify(src, definition=10, correction=0.5)

    lines = text.splitlines()
    assert len(lines) == 3  # 10 -> 5 rows, squashed to 2.5, rounded up
    assert all(len(line) == 10 for line in lines)
    assert sorted(p.name for p in tmp_path.iterdir()) == ['foo.png']


def test_asciify_save_txt_never_overwrites(tmp_path: Path) -> None:
    src = save_pixels(tmp_path / 'foo.png', [[(255, 255, 255), (0, 0, 0)]])

    first = image.asciify(src, correction=1.0, chars=' .#', save_txt=True)
    image.asciify(src, correction=1.0, chars=' .#', save_txt=True)

    assert first == '# \n'
    assert (tmp_path / 'foo.txt').read_text(encoding='utf-8') == '# \n'
    assert (tmp_path / 'foo2.txt').read_text(encoding='utf-8') == '# \n'


def test_asciify_reverse_chars(tmp_path: Path) -> None:
    src = save_pixels(tmp_path / 'foo.png', [[(255, 255, 255), (1, 1, 1)]])

    assert image.asciify(src, correction=1.0, chars=' .#', reverse_chars=True) == ' #\n'
    assert image.asciify(src, correction=1.0, chars='.:#', reverse_chars=True) == '.#\n'


def test_asciify_threshold(tmp_path: Path) -> None:
    src = save_pixels(tmp_path / 'foo.png', [[(100, 100, 100), (200, 200, 200)]])

    assert image.asciify(src, correction=1.0, chars='.:#', threshold=150) == ' .\n'


def test_asciify_with_config(tmp_path: Path) -> None:
    src = save_gradient(tmp_path / 'foo.png', (20, 10))
    config = ConversionConfig(target_columns=4, font_aspect_ratio=1.0)

    assert [len(line) for line in image.asciify(src, config=config).splitlines()] == [4, 4]
    assert [len(line) for line in image.asciify(src, definition=10, config=config).splitlines()] == [10] * 5
