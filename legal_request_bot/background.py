"""Utilities for running background tasks."""

from __future__ import annotations

import threading
from contextvars import copy_context
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Any, Callable

import structlog
from structlog.contextvars import bind_contextvars, get_contextvars

MAX_WORKERS = 4

_executor: ThreadPoolExecutor | None = None
_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix="legal-bot")
        return _executor


def _task_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


def _log_outcome(future: Future, *, task: str, trace_id: str | None) -> None:
    log = structlog.get_logger().bind(task=task)
    if trace_id is not None:
        log = log.bind(trace_id=trace_id)

    try:
        exc = future.exception()
    except CancelledError:
        log.warning("background_task_cancelled")
        return

    if exc is not None:
        log.error(
            "background_task_failed",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def run_async(
    func: Callable[..., Any],
    /,
    *args: Any,
    trace_id: str | None = None,
    **kwargs: Any,
) -> Future:
    """Submit *func* to the shared thread pool and return a Future.

    The caller's context variables (including the structlog ``trace_id``)
    are copied into the worker. Exceptions escaping *func* are logged as
    ``background_task_failed`` and remain available on the returned Future.
    """

    context = copy_context()

    if trace_id is not None:
        existing_trace = context.run(lambda: get_contextvars().get("trace_id"))

        if existing_trace != trace_id:

            context.run(lambda: bind_contextvars(trace_id=trace_id))

    effective_trace = context.run(lambda: get_contextvars().get("trace_id"))

    def runner() -> Any:
        return context.run(func, *args, **kwargs)

    future = _get_executor().submit(runner)
    task = _task_name(func)
    future.add_done_callback(lambda done: _log_outcome(done, task=task, trace_id=effective_trace))
    return future


def shutdown_background(*, cancel_pending: bool = True, wait: bool = True) -> None:
    """Stop the shared executor, optionally cancelling jobs that have not started.

    A later call to :func:`run_async` starts a fresh executor.
    """

    global _executor
    with _lock:
        executor, _executor = _executor, None

    if executor is not None:
        executor.shutdown(wait=wait, cancel_futures=cancel_pending)
