from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Callable, Optional

from postes.api.retry import retry_with_backoff

log = logging.getLogger(__name__)

INIT_ATTEMPTS = 3
INIT_BASE_DELAY = 1.0
DASHBOARD_STALE_SECONDS = 5 * 60


class TimerRegistry:
    """
    Keeps the handles of every callback scheduled through it so a page can
    cancel its own timers, and only those, when it is torn down.
    `scheduler` is anything with tkinter's after/after_cancel.
    """

    def __init__(self, scheduler):
        self.scheduler = scheduler
        self._handles: set[Any] = set()

    def schedule(self, ms: int, callback: Callable[[], Any]) -> Any:
        handle = None

        def _run():
            self._handles.discard(handle)
            callback()

        handle = self.scheduler.after(ms, _run)
        self._handles.add(handle)
        return handle

    def cancel(self, handle: Any) -> None:
        if handle in self._handles:
            self._handles.discard(handle)
            self.scheduler.after_cancel(handle)

    def cancel_all(self) -> int:
        handles = list(self._handles)
        self._handles.clear()
        for h in handles:
            self.scheduler.after_cancel(h)
        return len(handles)

    def __len__(self) -> int:
        return len(self._handles)


@dataclass
class PageState:
    init: Callable[[], Any]
    cleanup: Optional[Callable[[], Any]] = None
    timers: Optional[TimerRegistry] = None
    initialized: bool = False
    last_update: Optional[float] = None


class PageRouter:
    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._pages: dict[str, PageState] = {}
        self._sleep = sleep
        self._clock = clock
        self._navigating = False
        self.current: Optional[str] = None

    def register(
        self,
        pagina: str,
        init: Callable[[], Any],
        cleanup: Optional[Callable[[], Any]] = None,
        timers: Optional[TimerRegistry] = None,
    ) -> None:
        self._pages[pagina] = PageState(init=init, cleanup=cleanup, timers=timers)

    def state(self, pagina: str) -> PageState:
        return self._pages[pagina]

    @property
    def navigating(self) -> bool:
        return self._navigating

    def _teardown(self, pagina: str) -> None:
        page = self._pages.get(pagina)
        if page is None:
            return
        if page.timers is not None:
            cancelled = page.timers.cancel_all()
            if cancelled:
                log.info("timers_cancelled page=%s count=%s", pagina, cancelled)
        if page.cleanup is not None:
            try:
                page.cleanup()
            except Exception as e:
                log.exception("page_cleanup_failed page=%s error=%s", pagina, e)

    def navegar(self, pagina: str) -> bool:
        """
        Switches to `pagina`. Returns False when another navigation is still
        running. Init failures are retried with backoff and then re-raised.
        """
        if pagina not in self._pages:
            raise KeyError(f"Unknown page: {pagina}")
        if self._navigating:
            log.warning("navigation_ignored page=%s current=%s", pagina, self.current)
            return False

        self._navigating = True
        try:
            if self.current is not None and self.current != pagina:
                self._teardown(self.current)
                self.current = None

            page = self._pages[pagina]
            retry_with_backoff(
                page.init,
                attempts=INIT_ATTEMPTS,
                base_delay=INIT_BASE_DELAY,
                sleep=self._sleep,
                label=f"init:{pagina}",
            )
            page.initialized = True
            page.last_update = self._clock()
            self.current = pagina
            log.info("page_loaded page=%s", pagina)
            return True
        finally:
            self._navigating = False

    def marcar_atualizado(self, pagina: str) -> None:
        self._pages[pagina].last_update = self._clock()

    def precisa_recarregar(self, pagina: str) -> bool:
        page = self._pages.get(pagina)
        if page is None or not page.initialized:
            return True
        if pagina == "dashboard":
            if page.last_update is None:
                return True
            return self._clock() - page.last_update > DASHBOARD_STALE_SECONDS
        return False
