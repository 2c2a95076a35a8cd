from typing import Any, Union, Optional, Tuple, Callable, NoReturn
import subprocess
import os
import sys
import warnings
from math import floor
from pathlib import Path
from time import perf_counter
from .typealiases import SomeSortOfPath, Number


def run(executable: str, *args: str, get_stderr=False) -> Tuple[int, str]:
    """Run a system command."""
    process = subprocess.run([executable, *args], text=True, capture_output=True)
    if get_stderr:
        return process.returncode, process.stderr.strip('\n')
    return process.returncode, process.stdout.strip('\n')


def multiprocessing_guard() -> Optional[NoReturn]:
    """Ensure that the top-level script has a 'if __name__ == "__main__"' check. Call ``release_guard`` once the
    worker pool is done."""
    if int(os.environ.get('ASCIIFRAMES_PROCESS', '0')):
        warnings.warn(
            '\nAn asciiframes batch is being repeatedly started when helper processes are spawned.\n'
            'This can be solved by adding a \'if __name__ == "__main__"\' check in the entry point of your code.\n'
            'Example:\n\nimport asciiframes as af\n\nif __name__ == "__main__":\n'
            '    af.video.asciify("foo.mp4", "out")\n',
            RuntimeWarning)
        sys.exit()
    os.environ['ASCIIFRAMES_PROCESS'] = '1'


def release_guard() -> None:
    os.environ['ASCIIFRAMES_PROCESS'] = '0'


def conditional_print(quiet: bool) -> Callable:
    """Return a conditional print function."""
    def _print(*values: Any, end: str = '\n'):
        if not quiet:
            print(*values, end=end)
    return _print


def round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves going up (``round()`` rounds them to even)."""
    return int(floor(value + 0.5))


def ld_0(num: Union[Number, str]) -> str:
    """Leading zero version of a number."""
    return '0' * (int(num) < 10) + str(num)


def in_minutes(seconds: Number) -> str:
    """Display a seconds value as MM:SS"""
    minutes = seconds // 60
    return ld_0(minutes) + ':' + ld_0(seconds - minutes * 60)


def time_remaining(
        progress: Number, whole: Number, start_time: float, curr_time: float, last_checked: float) -> Optional[str]:
    """Estimates remaining time out of a progress/whole operation. Only recalculated every two seconds."""
    if (curr_time - last_checked) > 2:
        return in_minutes(int((curr_time - start_time) * (whole - progress) / progress))


class ProgressPrinter:
    """Progress callback for ``BatchPipeline``. Rewrites a single console line with the percentage done and the
    estimated time remaining."""

    def __init__(self, label: str = 'Generating ASCII Art...', quiet: bool = False) -> None:
        self.label = label
        self.quiet = quiet
        self.start_time = perf_counter()
        self.last_checked = 0.0
        self.time_left = None

    def __call__(self, completed: int, total: int) -> None:
        if self.quiet or not total:
            return
        curr_time = perf_counter()
        calculated = time_remaining(completed, total, self.start_time, curr_time, self.last_checked)
        self.time_left = calculated or self.time_left
        if calculated is not None:
            self.last_checked = curr_time
        progress = f'{self.label} {int(100 * (completed / total))}%.'
        if self.time_left is not None:
            progress += f' {self.time_left} Remaining.'
        print('\r', end='')
        print(progress, end='', flush=True)

    def finish(self) -> None:
        if not self.quiet:
            print(f'\nCompleted in: {in_minutes(int(perf_counter() - self.start_time))}.')


def safe_path(path: SomeSortOfPath, ext: str = None, as_path_obj: bool = False) -> Union[str, Path]:
    """Return whatever path is available by incrementing a suffix number in the filename. If the
    passed input path (with ``ext`` applied) doesn't exist, return it."""
    if not isinstance(path, Path):
        path = Path(path)
    if ext is None:
        ext = path.suffix[1:]
    path = path.with_suffix(f'.{ext}')
    if not path.exists():
        return path if as_path_obj else str(path)

    index = -1
    parent = path.parent
    stem = path.stem
    while -index <= len(stem) and stem[index].isdigit():
        index -= 1

    try:
        k = int(stem[index + 1:]) + 1
        stem = stem[:index + 1]
    except ValueError:
        k = 2

    while (parent / f'{stem}{k}.{ext}').exists():
        k += 1

    resp = parent / f'{stem}{k}.{ext}'
    return resp if as_path_obj else str(resp)


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question on the terminal. Non-interactive sessions get the default."""
    if not sys.stdin.isatty():
        return default
    hint = '[Y/n]' if default else '[y/N]'
    answer = input(f'{message} {hint} ').strip().lower()
    if not answer:
        return default
    return answer in ('y', 'yes')


def prompt(label: str, default: Any, cast: Callable[[str], Any] = str) -> Any:
    """Ask for a value on the terminal, falling back to ``default`` on empty input. Repeats on bad input."""
    while True:
        answer = input(f'{label} [{default}]: ').strip()
        if not answer:
            return default
        try:
            return cast(answer)
        except ValueError:
            print(f'Invalid value: {answer!r}')
