from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from asciiframes import utils


@pytest.mark.parametrize(('value', 'expected'), [(0.0, 0), (0.5, 1), (2.5, 3), (3.49, 3), (254.6, 255)])
def test_round_half_up(value: float, expected: int) -> None:
    assert utils.round_half_up(value) == expected


def test_in_minutes() -> None:
    assert utils.in_minutes(75) == '01:15'
    assert utils.in_minutes(5) == '00:05'


def test_time_remaining_waits_between_checks() -> None:
    assert utils.time_remaining(1, 4, 0.0, 1.0, 0.0) is None
    assert utils.time_remaining(1, 4, 0.0, 3.0, 0.0) == '00:09'


def test_conditional_print(capsys: pytest.CaptureFixture) -> None:
    utils.conditional_print(True)('hidden')
    utils.conditional_print(False)('shown')

    assert capsys.readouterr().out == 'shown\n'


def test_progress_printer(capsys: pytest.CaptureFixture) -> None:
    progress = utils.ProgressPrinter()

    progress(1, 2)
    progress(2, 2)
    progress.finish()

    out = capsys.readouterr().out
    assert 'Generating ASCII Art... 50%.' in out
    assert 'Generating ASCII Art... 100%.' in out
    assert 'Completed in: 00:00.' in out


def test_progress_printer_quiet(capsys: pytest.CaptureFixture) -> None:
    progress = utils.ProgressPrinter(quiet=True)

    progress(1, 2)
    progress.finish()

    assert capsys.readouterr().out == ''


def test_safe_path(tmp_path: Path) -> None:
    image = tmp_path / 'foo.png'

    assert utils.safe_path(image, ext='txt') == str(tmp_path / 'foo.txt')
    (tmp_path / 'foo.txt').write_text('')
    assert utils.safe_path(image, ext='txt', as_path_obj=True) == tmp_path / 'foo2.txt'
    (tmp_path / 'foo2.txt').write_text('')
    assert utils.safe_path(tmp_path / 'foo2.txt', as_path_obj=True) == tmp_path / 'foo3.txt'


def test_safe_path_with_numeric_stem(tmp_path: Path) -> None:
    (tmp_path / '0001.txt').write_text('')

    assert utils.safe_path(tmp_path / '0001.txt') == str(tmp_path / '2.txt')


def test_multiprocessing_guard_blocks_reentry() -> None:
    utils.multiprocessing_guard()
    try:
        with pytest.warns(RuntimeWarning), pytest.raises(SystemExit):
            utils.multiprocessing_guard()
    finally:
        utils.release_guard()
    assert os.environ['ASCIIFRAMES_PROCESS'] == '0'


def test_confirm_without_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('sys.stdin', io.StringIO('y\n'))

    assert utils.confirm('Overwrite?') is False
    assert utils.confirm('Overwrite?', default=True) is True


def test_confirm_on_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    class Tty(io.StringIO):
        def isatty(self) -> bool:
            return True

    monkeypatch.setattr('sys.stdin', Tty(''))
    replies = iter(['yes', '', 'n'])
    monkeypatch.setattr('builtins.input', lambda prompt='': next(replies))

    assert utils.confirm('Overwrite?') is True
    assert utils.confirm('Overwrite?') is False
    assert utils.confirm('Overwrite?', default=True) is False


def test_run_captures_output() -> None:
    code, stdout = utils.run('sh', '-c', 'echo hello; echo oops >&2; exit 3')
    assert (code, stdout) == (3, 'hello')
    assert utils.run('sh', '-c', 'echo oops >&2', get_stderr=True) == (0, 'oops')
