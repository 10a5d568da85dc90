"""Bounded, cancellable invocation of a ContentGenerator."""
from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional

from wiki_authoring.domain.wiki.models import DraftContent
from wiki_authoring.generation.content_generator import ContentGenerator, GeneratorError

logger = logging.getLogger(__name__)

# How often the waiting caller checks for cancellation.
_POLL_INTERVAL = 0.05


def call_with_timeout(
    generator: ContentGenerator,
    project_id: int,
    seed: DraftContent,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DraftContent:
    """
    Run generator.generate on a worker thread and wait for it.

    Raises GeneratorError if the generator fails, if `timeout` seconds pass,
    or if `cancel_event` is set first. On timeout or cancellation the worker
    is abandoned and its eventual result is discarded.

    An abandoned worker is not interrupted. The concurrent.futures exit hook
    still joins it, so a hung generator can hold up interpreter shutdown until
    its own transport timeout (the `requests` timeout for the HTTP generator)
    expires.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="content-generator")
    future: Future = executor.submit(generator.generate, project_id, seed.copy())
    executor.shutdown(wait=False)

    deadline = None if timeout is None else time.monotonic() + timeout
    while not future.done():
        if cancel_event is not None and cancel_event.is_set():
            future.cancel()
            raise GeneratorError("Content generation was cancelled.")
        slice_ = _POLL_INTERVAL
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                raise GeneratorError(f"Content generation timed out after {timeout:g}s.")
            slice_ = min(slice_, remaining)
        wait([future], timeout=slice_)

    if cancel_event is not None and cancel_event.is_set():
        raise GeneratorError("Content generation was cancelled.")

    error = future.exception()
    if isinstance(error, GeneratorError):
        raise error
    if error is not None:
        logger.warning("Content generator raised %s: %s", type(error).__name__, error)
        raise GeneratorError(f"Content generator failed: {error}") from error

    result = future.result()
    if not isinstance(result, DraftContent):
        raise GeneratorError("Content generator returned no content.")
    return result
