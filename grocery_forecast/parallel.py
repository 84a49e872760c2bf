"""
Worker Pool Module

Process pool for coarse-grained parallelism across partitions. Each worker
imports the statistics libraries before accepting work; work inside a worker
is sequential.
"""

import importlib
from concurrent.futures import ProcessPoolExecutor
from contextlib import contextmanager
from multiprocessing import cpu_count
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from grocery_forecast.exceptions import WorkerSetupError


def default_n_workers() -> int:
    """All cores but one, at least 1"""
    return max(1, cpu_count() - 1)


def load_libraries(libraries: Sequence[str]) -> None:
    """
    Import every library, failing on the first one that is missing

    Args:
        libraries: Importable module names

    Raises:
        WorkerSetupError: If a library cannot be imported
    """
    for library in libraries:
        try:
            importlib.import_module(library)
        except ImportError as e:
            raise WorkerSetupError(library, str(e)) from e


@contextmanager
def worker_pool(n_workers: Optional[int] = None,
                libraries: Sequence[str] = ()) -> Iterator[ProcessPoolExecutor]:
    """
    Create a worker pool and guarantee it is torn down

    The libraries are checked in this process first, so a missing library
    fails here rather than inside a worker, and then imported by every worker
    on start-up.

    Args:
        n_workers: Number of worker processes. If None, cpu_count() - 1
        libraries: Module names every worker must have loaded

    Yields:
        ProcessPoolExecutor
    """
    if n_workers is None:
        n_workers = default_n_workers()
    if n_workers < 1:
        raise ValueError(f"n_workers must be at least 1, got {n_workers}")

    libraries = tuple(libraries)
    load_libraries(libraries)

    pool = ProcessPoolExecutor(
        max_workers=n_workers,
        initializer=load_libraries,
        initargs=(libraries,)
    )
    print(f"  Worker pool started: {n_workers} workers, libraries: {list(libraries)}")

    try:
        yield pool
    finally:
        pool.shutdown(wait=True, cancel_futures=True)
        print("  Worker pool stopped")


def parallel_map(pool: ProcessPoolExecutor, fn: Callable, *iterables: Iterable) -> List:
    """
    Apply `fn` across the iterables in the pool

    Blocks until every call has finished. Results are in input order; the
    first failing call re-raises its exception here.

    Args:
        pool: Pool from worker_pool()
        fn: Module-level callable
        *iterables: One iterable per argument of `fn`, zipped like map()

    Returns:
        List of results
    """
    return list(pool.map(fn, *iterables))
