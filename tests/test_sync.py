"""Tests for OutputSync and source purging."""

from __future__ import annotations

from pathlib import Path
from typing import List

from asciiframes.sync import OutputSync, purge_sources

from conftest import save_image


def previous_run(directory: Path) -> None:
    save_image(directory / 'frame_0001.png', (2, 2))
    save_image(directory / 'frame_0002.png', (2, 2))
    (directory / 'frame_0001.txt').write_text('#\n', encoding='utf-8')
    (directory / 'frame_0002.txt').write_text('#\n', encoding='utf-8')
    (directory / 'notes.md').write_text('keep me', encoding='utf-8')
    save_image(directory / 'holiday.png', (2, 2))
    (directory / 'holiday.txt').write_text('#\n', encoding='utf-8')
    (directory / 'notes.txt').write_text('keep me too', encoding='utf-8')


def test_prepare_creates_missing_directory(tmp_path: Path) -> None:
    dest = tmp_path / 'out' / 'frame_images'

    assert OutputSync(dest).prepare() is True
    assert dest.is_dir()


def test_empty_directory_needs_no_confirmation(tmp_path: Path) -> None:
    asked: List[str] = []

    assert OutputSync(tmp_path, confirm=lambda m: asked.append(m) or False).prepare() is True
    assert asked == []


def test_artifacts_follow_naming_convention(tmp_path: Path) -> None:
    previous_run(tmp_path)

    names = [p.name for p in OutputSync(tmp_path).artifacts()]

    assert names == ['frame_0001.png', 'frame_0001.txt', 'frame_0002.png', 'frame_0002.txt', 'holiday.txt']


def test_declined_overwrite_changes_nothing(tmp_path: Path) -> None:
    previous_run(tmp_path)
    before = {p.name: p.read_bytes() for p in tmp_path.iterdir()}
    asked: List[str] = []

    prepared = OutputSync(tmp_path, confirm=lambda m: asked.append(m) or False).prepare()

    assert prepared is False
    assert len(asked) == 1
    assert str(tmp_path) in asked[0]
    assert {p.name: p.read_bytes() for p in tmp_path.iterdir()} == before


def test_no_confirmation_means_cancel(tmp_path: Path) -> None:
    previous_run(tmp_path)

    assert OutputSync(tmp_path).prepare() is False
    assert (tmp_path / 'frame_0001.txt').exists()


def test_confirmed_overwrite_removes_only_artifacts(tmp_path: Path) -> None:
    previous_run(tmp_path)

    assert OutputSync(tmp_path, confirm=lambda m: True).prepare() is True
    assert sorted(p.name for p in tmp_path.iterdir()) == ['holiday.png', 'notes.md', 'notes.txt']


def test_forced_overwrite_skips_confirmation(tmp_path: Path) -> None:
    previous_run(tmp_path)

    def confirm(message: str) -> bool:
        raise AssertionError('should not be asked')

    assert OutputSync(tmp_path, force=True, confirm=confirm).prepare() is True
    assert not list(tmp_path.glob('frame_*'))


def test_images_left_alone_when_excluded(tmp_path: Path) -> None:
    previous_run(tmp_path)

    OutputSync(tmp_path, force=True, include_images=False).prepare()

    assert sorted(p.name for p in tmp_path.iterdir()) == [
        'frame_0001.png', 'frame_0002.png', 'holiday.png', 'notes.md', 'notes.txt']


def test_custom_prefix(tmp_path: Path) -> None:
    save_image(tmp_path / 'shot12.png', (2, 2))
    save_image(tmp_path / 'frame_0001.png', (2, 2))

    assert [p.name for p in OutputSync(tmp_path, prefix='shot').artifacts()] == ['shot12.png']


def test_purge_sources_skips_missing_files(tmp_path: Path) -> None:
    first = save_image(tmp_path / 'frame_0001.png', (2, 2))
    missing = tmp_path / 'frame_0002.png'

    removed = purge_sources([first, missing])

    assert removed == [first]
    assert not first.exists()


def test_text_named_after_a_source_image_is_an_artifact(tmp_path: Path) -> None:
    src = tmp_path / 'src'
    dest = tmp_path / 'out'
    save_image(src / 'beach.jpg', (2, 2))
    dest.mkdir()
    (dest / 'beach.txt').write_text('#\n', encoding='utf-8')
    (dest / 'readme.txt').write_text('keep me', encoding='utf-8')

    assert [p.name for p in OutputSync(dest, src_dir=src).artifacts()] == ['beach.txt']
    assert OutputSync(dest).artifacts() == []
