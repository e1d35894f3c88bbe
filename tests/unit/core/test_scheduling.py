"""Тесты Debouncer и Throttler."""

import threading
from unittest.mock import MagicMock

import pytest

from settings_search.core import Debouncer, Throttler


class TestDebouncer:
    """Тесты Debouncer."""

    def test_only_last_call_runs(self):
        callback = MagicMock()
        debouncer = Debouncer(10, callback)

        debouncer.call("ema")
        debouncer.call("email")
        assert debouncer.pending is True
        callback.assert_not_called()

        assert debouncer.flush() is True
        callback.assert_called_once_with("email")
        assert debouncer.pending is False

    def test_cancel(self):
        callback = MagicMock()
        debouncer = Debouncer(10, callback)
        debouncer.call("x")
        debouncer.cancel()
        assert debouncer.flush() is False
        callback.assert_not_called()

    def test_zero_delay_runs_inline(self):
        callback = MagicMock()
        Debouncer(0, callback).call("x", flag=True)
        callback.assert_called_once_with("x", flag=True)

    def test_per_call_delay_override(self):
        callback = MagicMock()
        debouncer = Debouncer(10, callback)
        debouncer.call("pending")
        debouncer.call("", delay=0)
        callback.assert_called_once_with("")
        assert debouncer.pending is False

    def test_timer_fires(self):
        fired = threading.Event()
        debouncer = Debouncer(0.01, lambda value: fired.set())
        debouncer.call("x")
        assert fired.wait(2)

    def test_callback_error_is_logged_not_raised(self):
        debouncer = Debouncer(0, MagicMock(side_effect=RuntimeError("boom")))
        debouncer.call()

    def test_negative_delay(self):
        with pytest.raises(ValueError):
            Debouncer(-1, MagicMock())


class TestThrottler:
    """Тесты Throttler."""

    def test_burst_collapsed_into_one_call(self):
        callback = MagicMock()
        throttler = Throttler(10, callback)
        for _ in range(5):
            throttler.schedule()
        assert throttler.pending is True

        assert throttler.flush() is True
        callback.assert_called_once_with()
        assert throttler.flush() is False

    def test_zero_interval_runs_inline(self):
        callback = MagicMock()
        Throttler(0, callback).schedule()
        callback.assert_called_once_with()

    def test_cancel(self):
        callback = MagicMock()
        throttler = Throttler(10, callback)
        throttler.schedule()
        throttler.cancel()
        assert throttler.pending is False
        callback.assert_not_called()

    def test_timer_fires(self):
        fired = threading.Event()
        throttler = Throttler(0.01, fired.set)
        throttler.schedule()
        assert fired.wait(2)

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            Throttler(-0.5, MagicMock())
