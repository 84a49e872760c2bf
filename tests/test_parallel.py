"""Tests for the worker pool."""

import math
import operator

import pytest

from grocery_forecast.exceptions import WorkerSetupError
from grocery_forecast.parallel import default_n_workers, load_libraries, parallel_map, worker_pool


class TestLoadLibraries:
    """Tests for worker library loading."""

    def test_available_libraries(self):
        load_libraries(['numpy', 'pandas', 'statsmodels.api', 'statsforecast.models'])

    def test_missing_library_raises(self):
        with pytest.raises(WorkerSetupError) as exc_info:
            load_libraries(['numpy', 'no_such_forecasting_library'])

        assert exc_info.value.library == 'no_such_forecasting_library'
        assert isinstance(exc_info.value.__cause__, ImportError)


class TestWorkerPool:
    """Tests for worker_pool and parallel_map."""

    def test_default_workers_at_least_one(self):
        assert default_n_workers() >= 1

    def test_results_keep_input_order(self):
        with worker_pool(2, ['math']) as pool:
            results = parallel_map(pool, pow, range(8), [2] * 8)

        assert results == [i ** 2 for i in range(8)]

    def test_multiple_argument_lists_are_zipped(self):
        with worker_pool(2) as pool:
            results = parallel_map(pool, operator.add, [1, 2, 3], [10, 20, 30])

        assert results == [11, 22, 33]

    def test_worker_error_propagates(self):
        """Test that a failing call fails the whole map."""
        with worker_pool(2) as pool:
            with pytest.raises(ValueError, match="math domain error"):
                parallel_map(pool, math.sqrt, [4.0, -1.0, 9.0])

    def test_missing_library_fails_before_start(self, capsys):
        with pytest.raises(WorkerSetupError):
            with worker_pool(2, ['no_such_forecasting_library']):
                pass

        assert "Worker pool started" not in capsys.readouterr().out

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError, match="at least 1"):
            with worker_pool(0):
                pass

    def test_pool_is_shut_down(self):
        with worker_pool(1) as pool:
            parallel_map(pool, abs, [-1])

        with pytest.raises(RuntimeError):
            pool.submit(abs, -1)
