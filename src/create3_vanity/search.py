"""
Parallel CREATE3 Vanity Salt Search

The integer range [start, start + count) is split into contiguous sub-ranges,
one per worker process. Each worker turns every integer into a 32-byte salt,
predicts the CREATE3 address and checks it against the vanity pattern. The
first worker to report a match wins and all other workers are told to stop.

Note:
    There is no lowest-salt guarantee across workers: whichever worker
    reports first wins, even if another sub-range holds a smaller salt.
    Within a sub-range, salts are always tried in increasing order.
"""

import multiprocessing
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from .derivation import (
    MAX_SALT,
    format_salt,
    parse_address,
    predict_address,
    to_checksum,
)
from .matcher import VanityPattern

DEFAULT_COUNT = 10_000_000
# Candidates checked between two looks at the stop event
DEFAULT_CHECK_INTERVAL = 4096
# Candidates between two progress reports of an inline search
DEFAULT_PROGRESS_INTERVAL = 100_000

_stop_event = None


class SearchWorkerError(RuntimeError):
    """A worker failed before finishing its range; the search is inconclusive."""


@dataclass(frozen=True)
class SearchTask:
    """One worker's share of the search."""

    deployer: bytes
    pattern: VanityPattern
    start: int
    count: int


@dataclass(frozen=True)
class MatchResult:
    """A salt whose predicted address matches the pattern.

    `attempts` counts the candidates the reporting worker checked in its own
    sub-range, the match included.
    """

    salt: bytes
    address: bytes
    attempts: int

    @property
    def salt_hex(self) -> str:
        return "0x" + self.salt.hex()

    @property
    def address_hex(self) -> str:
        return to_checksum(self.address)


def partition(start: int, count: int, workers: int) -> List[Tuple[int, int]]:
    """Split [start, start + count) into `workers` contiguous ranges.

    Args:
        start: First integer of the range.
        count: Number of integers in the range.
        workers: Number of sub-ranges to produce.

    Returns:
        list: (start, count) pairs in increasing order. Every range but the
        last has `count // workers` elements; the last absorbs the remainder.

    Example:
        >>> partition(10, 7, 3)
        [(10, 2), (12, 2), (14, 3)]
    """
    if workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {workers}")
    chunk = count // workers
    ranges = []
    for i in range(workers):
        sub_count = count - chunk * i if i == workers - 1 else chunk
        ranges.append((start + chunk * i, sub_count))
    return ranges


def search_range(
    task: SearchTask,
    stop_event=None,
    check_interval: int = DEFAULT_CHECK_INTERVAL,
    progress: Optional[Callable[[int, int], None]] = None,
    progress_interval: Optional[int] = None,
) -> Optional[MatchResult]:
    """Try every salt of a task's range in increasing order.

    Args:
        task: The sub-range and pattern to search.
        stop_event: Optional event; when set the search gives up early.
        check_interval: Number of candidates between two checks of stop_event.
        progress: Optional callback, called as progress(checked, value) every
            progress_interval candidates.
        progress_interval: Number of candidates between two progress calls,
            DEFAULT_PROGRESS_INTERVAL when None.

    Returns:
        MatchResult for the first matching salt, or None if the range is
        exhausted or the search was stopped.
    """
    deployer = task.deployer
    pattern = task.pattern
    end = task.start + task.count
    if progress_interval is None:
        progress_interval = DEFAULT_PROGRESS_INTERVAL

    for attempt, value in enumerate(range(task.start, end), 1):
        if stop_event is not None and attempt % check_interval == 0:
            if stop_event.is_set():
                return None
        if progress is not None and attempt % progress_interval == 0:
            progress(attempt, value)
        salt = format_salt(value)
        address = predict_address(deployer, salt)
        if pattern.matches(address):
            return MatchResult(salt=salt, address=address, attempts=attempt)

    return None


def _init_worker(stop_event):
    global _stop_event
    _stop_event = stop_event


def _run_task(task: SearchTask, check_interval: int) -> Optional[MatchResult]:
    return search_range(task, _stop_event, check_interval)


def run_tasks(
    tasks: List[SearchTask],
    check_interval: int = DEFAULT_CHECK_INTERVAL,
    progress: Optional[Callable[[int, int], None]] = None,
) -> Optional[MatchResult]:
    """Run search tasks, one process each, and return the first match.

    A single task runs in the calling process and is the only one that
    reports progress; callbacks do not cross process boundaries.

    Returns:
        The first MatchResult reported, or None when every task exhausted
        its range.

    Raises:
        SearchWorkerError: If any worker failed before a match was reported.
    """
    if len(tasks) == 1:
        try:
            return search_range(tasks[0], None, check_interval, progress)
        except Exception as e:
            raise SearchWorkerError(f"Search worker failed: {e}") from e

    ctx = multiprocessing.get_context("spawn")
    stop_event = ctx.Event()
    executor = ProcessPoolExecutor(
        max_workers=len(tasks),
        mp_context=ctx,
        initializer=_init_worker,
        initargs=(stop_event,),
    )
    try:
        pending = {executor.submit(_run_task, task, check_interval) for task in tasks}
        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                error = future.exception()
                if error is not None:
                    raise SearchWorkerError(f"Search worker failed: {error}") from error
                result = future.result()
                if result is not None:
                    return result
        return None
    finally:
        stop_event.set()
        executor.shutdown(wait=True, cancel_futures=True)


def find_salt(
    deployer: Union[str, bytes],
    prefix: str = "",
    suffix: str = "",
    start: int = 0,
    count: int = DEFAULT_COUNT,
    workers: int = 1,
    check_interval: int = DEFAULT_CHECK_INTERVAL,
    progress: Optional[Callable[[int, int], None]] = None,
) -> Optional[MatchResult]:
    """Search [start, start + count) for a salt whose CREATE3 address matches.

    Args:
        deployer: Address of the CREATE3 deployer contract.
        prefix: Required hex prefix of the address (case-insensitive).
        suffix: Required hex suffix of the address (case-insensitive).
        start: First salt integer to try.
        count: Number of salts to try.
        workers: Number of worker processes.
        check_interval: Candidates between two checks for cancellation.
        progress: Optional progress(checked, value) callback, called every
            DEFAULT_PROGRESS_INTERVAL candidates when running with one worker.

    Returns:
        MatchResult if a salt was found, None if the range holds no match.

    Raises:
        ValueError: If any input is invalid. No worker is started.
        SearchWorkerError: If a worker failed; the result is inconclusive.

    Example:
        >>> result = find_salt("0x" + "11" * 20, prefix="ab", count=10_000)
        >>> if result:
        ...     print(result.salt_hex, result.address_hex)
    """
    deployer_bytes = parse_address(deployer)
    pattern = VanityPattern(prefix, suffix)

    for name, value in (("start", start), ("count", count), ("workers", workers)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
    if start < 0:
        raise ValueError(f"start must be non-negative, got {start}")
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    if start + count > MAX_SALT:
        raise ValueError("Search range exceeds the 256-bit salt space")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if check_interval < 1:
        raise ValueError(f"check_interval must be at least 1, got {check_interval}")

    tasks = [
        SearchTask(
            deployer=deployer_bytes, pattern=pattern, start=sub_start, count=sub_count
        )
        for sub_start, sub_count in partition(start, count, workers)
    ]
    return run_tasks(tasks, check_interval, progress)
