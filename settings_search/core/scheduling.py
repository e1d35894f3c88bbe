"""Отложенный запуск: debounce поиска и throttle записи истории.

Два независимых таймера с разными правилами отмены: ввод сбрасывает
debounce, а throttle объединяет пачку изменений в одну запись.

Классы:
    Debouncer
        Запуск после паузы; каждый вызов сбрасывает таймер.
    Throttler
        Не более одного запуска за интервал (trailing edge).
"""

import threading
from typing import Any, Callable, Optional

from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


class Debouncer:
    """Откладывает вызов callback до паузы во входящих вызовах.

    Каждый call() отменяет ожидающий запуск и планирует новый
    (таймер сбрасывается, а не продлевается). Срабатывает только
    последний вызов в окне. Задержка 0 выполняет callback сразу.

    Потокобезопасный. Таймеры - daemon threading.Timer.

    Example:
        >>> debouncer = Debouncer(0.3, run_search)
        >>> debouncer.call("ema")
        >>> debouncer.call("email")  # только этот дойдёт до run_search
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")

        self.delay = delay
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple[tuple, dict]] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def call(self, *args: Any, delay: Optional[float] = None, **kwargs: Any) -> None:
        """Планирует callback(*args, **kwargs).

        Args:
            delay: Задержка для этого вызова (по умолчанию self.delay).
        """
        effective = self.delay if delay is None else delay

        with self._lock:
            self._cancel_locked()
            if effective > 0:
                self._pending = (args, kwargs)
                generation = self._generation
                self._timer = threading.Timer(effective, self._fire, args=(generation,))
                self._timer.daemon = True
                self._timer.start()
                return

        self._run(args, kwargs)

    def flush(self) -> bool:
        """Выполняет ожидающий вызов немедленно.

        Returns:
            True если был ожидающий вызов.
        """
        with self._lock:
            pending = self._pending
            self._cancel_locked()

        if pending is None:
            return False

        self._run(*pending)
        return True

    def cancel(self) -> None:
        """Отменяет ожидающий вызов."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
        # Таймер, уже начавший выполнение, увидит другое поколение
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                return
            pending = self._pending
            self._pending = None
            self._timer = None

        self._run(*pending)

    def _run(self, args: tuple, kwargs: dict) -> None:
        try:
            self._callback(*args, **kwargs)
        except Exception as e:
            logger.error_with_context(e, "Debounced callback failed")


class Throttler:
    """Ограничивает частоту вызова callback.

    schedule() запускает таймер, только если запуск ещё не запланирован,
    поэтому серия вызовов за interval превращается в один вызов в конце
    интервала. Interval 0 выполняет callback сразу.

    Example:
        >>> throttler = Throttler(1.0, save_history)
        >>> for term in terms:
        ...     throttler.schedule()  # не более одной записи в секунду
    """

    def __init__(self, interval: float, callback: Callable[[], Any]):
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")

        self.interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        """Планирует вызов, если он ещё не запланирован."""
        if self.interval == 0:
            self._run()
            return

        with self._lock:
            if self._timer is not None:
                return
            generation = self._generation
            self._timer = threading.Timer(self.interval, self._fire, args=(generation,))
            self._timer.daemon = True
            self._timer.start()

        logger.trace("Throttled call scheduled", interval_ms=round(self.interval * 1000))

    def flush(self) -> bool:
        """Выполняет запланированный вызов немедленно.

        Returns:
            True если вызов был запланирован.
        """
        with self._lock:
            had_pending = self._timer is not None
            self._cancel_locked()

        if had_pending:
            self._run()
        return had_pending

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None

        self._run()

    def _run(self) -> None:
        try:
            self._callback()
        except Exception as e:
            logger.error_with_context(e, "Throttled callback failed")
