"""
Shared plumbing for view-models: status enum, listeners, mount lifecycle.
"""

import asyncio
import sys
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, List, Optional, Set

from vetemr.models import Identity


class ViewStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERRORED = "errored"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"


class ViewModel:
    """
    Base class for a screen's state.

    ``state`` is an immutable dataclass replaced wholesale on every change.
    Each load takes a generation number; a result is applied only if the
    view is still mounted and no newer load has started since.
    """

    def __init__(self, session, gateway, initial_state):
        self._session = session
        self._gateway = gateway
        self.state = initial_state
        self._listeners: List[Callable[[Any], None]] = []
        self._mounted = False
        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()

    # ── Lifecycle ────────────────────────────────────────────────────

    async def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        self._unsubscribe = self._session.subscribe(self._on_session_change)
        await self.load()

    def unmount(self) -> None:
        self._mounted = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._listeners.clear()

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def load(self) -> None:
        raise NotImplementedError

    # ── Rendering ────────────────────────────────────────────────────

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    def _update(self, **changes) -> None:
        self._set_state(replace(self.state, **changes))

    # ── Load bookkeeping ─────────────────────────────────────────────

    def _begin(self) -> Optional[int]:
        """Start a load. Returns its generation, or None when logged out."""
        self._generation += 1
        if self._session.current_identity() is None:
            self._update(status=ViewStatus.UNAUTHENTICATED, error=None)
            return None
        self._update(status=ViewStatus.LOADING, error=None)
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    def _warn(self, what: str, error: Exception) -> None:
        print(f"[WARN] {what}: {error}", file=sys.stderr)

    # ── Session transitions ──────────────────────────────────────────

    def _identity(self) -> Optional[Identity]:
        return self._session.current_identity()

    def _on_session_change(self, identity: Optional[Identity]) -> None:
        if not self._mounted:
            return
        if identity is None:
            self._generation += 1
            self._update(status=ViewStatus.UNAUTHENTICATED, error=None)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: the owner calls load() explicitly.
            self._update(status=ViewStatus.LOADING, error=None)
            return
        task = loop.create_task(self.load())
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            print(f"[ERROR] Reload failed: {error!r}", file=sys.stderr)
