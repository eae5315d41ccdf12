"""
Asynchronous recognition: wraps a blocking OCR engine call.

The engine runs in a daemon worker thread so the event loop stays
responsive, and a timed-out call never holds up interpreter or loop shutdown.
Language and whitelist always come from the RecognitionConfig, engine
output is filtered to the whitelist, and every engine error surfaces as a
RecognitionFailure.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
import threading
import time
from typing import Any, Callable

from cancellation import CancellationToken
from errors import RecognitionFailure, RecognitionTimeout
from preprocessing.types import EncodedImage

from .engines import OCREngine, get_engine
from .progress import ProgressEvent, ProgressStream
from .types import RecognitionConfig, RecognitionResult
from .whitelist import filter_to_whitelist

logger = logging.getLogger(__name__)


def _log_progress(event: ProgressEvent) -> None:
    logger.debug("OCR progress [%s] %s: %.0f%%", event.engine, event.status, event.progress * 100)


def _run_in_daemon_thread(fn: Callable[..., Any], *args: Any) -> asyncio.Future:
    """Run ``fn(*args)`` in a new daemon thread; resolve a future on this loop.

    Unlike the loop's default executor, the thread is not joined when the
    loop shuts down, so abandoning the future abandons the call.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    context = contextvars.copy_context()

    def _resolve(result: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _worker() -> None:
        result, error = None, None
        try:
            result = context.run(fn, *args)
        except BaseException as e:
            error = e
        try:
            loop.call_soon_threadsafe(_resolve, result, error)
        except RuntimeError:
            logger.debug("Event loop closed before %r finished; result dropped", fn)

    threading.Thread(target=_worker, name="ocr-engine", daemon=True).start()
    return future


async def recognize(
    image: EncodedImage,
    config: RecognitionConfig | None = None,
    engine: OCREngine | None = None,
    cancel_token: CancellationToken | None = None,
    progress: ProgressStream | None = None,
) -> RecognitionResult:
    """Recognize Vietnamese text in an encoded image.

    Args:
        image: Normalized, encoded image.
        config: Recognition configuration. If None, uses default settings.
        engine: OCR engine to call. If None, uses the configured engine.
        cancel_token: Checked before the engine is called and after it returns.
        progress: Stream to publish engine progress on. One is created (and
                  closed) per call if not given.

    Returns:
        RecognitionResult with whitelist-filtered raw text.

    Raises:
        RecognitionTimeout: If the engine exceeds ``config.timeout``.
        RecognitionFailure: If the engine raises or returns a non-string.
        RunCancelled: If ``cancel_token`` was cancelled.
        ValueError: If the configuration is invalid.
    """
    if config is None:
        config = RecognitionConfig()
    config.validate()

    if engine is None:
        engine = get_engine()

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    owns_stream = progress is None
    stream = progress if progress is not None else ProgressStream()
    stream.subscribe(_log_progress)
    if config.on_progress is not None:
        stream.subscribe(config.on_progress)

    logger.info("Recognizing %r with %s", image, engine.name)
    call = _run_in_daemon_thread(
        engine.recognize,
        image,
        config.language,
        config.whitelist_string,
        stream.publish,
    )

    start = time.perf_counter()
    try:
        if config.timeout is None:
            raw = await call
        else:
            raw = await asyncio.wait_for(call, timeout=config.timeout)
    except asyncio.TimeoutError as e:
        logger.error("%s timed out after %ss", engine.name, config.timeout)
        raise RecognitionTimeout(config.timeout) from e
    except Exception as e:
        logger.error("%s failed: %s", engine.name, e, exc_info=True)
        raise RecognitionFailure(f"{engine.name} failed: {e}") from e
    finally:
        if owns_stream:
            stream.close()
    elapsed = time.perf_counter() - start

    if not isinstance(raw, str):
        raise RecognitionFailure(
            f"{engine.name} returned {type(raw).__name__}, expected str"
        )

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    text = filter_to_whitelist(raw, config.whitelist)
    if len(text) != len(raw):
        logger.debug("Whitelist filter changed %s engine output", engine.name)
    logger.info("%s finished in %.2fs (%s chars)", engine.name, elapsed, len(text))

    return RecognitionResult(
        text=text,
        engine=engine.name,
        elapsed=elapsed,
        progress=list(stream.history),
    )
