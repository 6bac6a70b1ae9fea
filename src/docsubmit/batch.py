"""Concurrent submission of many documents through one client."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Iterable

from tqdm.auto import tqdm

from .client import DocumentClient
from .errors import DocumentClientError
from .rate_limiter import CancelToken

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Outcome of submitting the document at position ``index``."""

    index: int
    body: str | None = None
    error: DocumentClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def submit_many(
    client: DocumentClient,
    documents: Iterable[Any],
    signature: str,
    *,
    workers: int = 4,
    show_progress: bool = True,
    progress_desc: str = "Submitting",
    cancel: CancelToken | None = None,
) -> list[SubmissionResult]:
    """
    Submit ``documents`` from a thread pool, all sharing ``client``'s rate limit.

    Client errors are recorded on the matching result instead of stopping the
    batch. Anything else (e.g. a ``None`` document, or KeyboardInterrupt while
    collecting results) cancels the documents that have not started, releases
    the workers still waiting for a permit, and is re-raised.

    Args:
        client: Client used for every submission
        documents: Documents to submit
        signature: Signature sent with each document
        workers: Number of submitting threads
        show_progress: Display a tqdm progress bar
        progress_desc: Label for the progress bar
        cancel: Optional token that aborts submissions still waiting for a permit

    Returns:
        One result per document, in input order
    """
    if workers < 1:
        raise ValueError("workers must be at least 1")

    documents = list(documents)
    results: list[SubmissionResult | None] = [None] * len(documents)
    abort = CancelToken()
    if cancel is not None:
        cancel.add_callback(abort.cancel)

    def _submit(index: int, document: Any) -> SubmissionResult:
        try:
            body = client.submit(document, signature, cancel=abort)
        except DocumentClientError as exc:
            return SubmissionResult(index, error=exc)
        return SubmissionResult(index, body=body)

    progress = tqdm(
        total=len(documents),
        desc=progress_desc,
        unit="doc",
        disable=not show_progress,
    )
    try:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures: list[Future[SubmissionResult]] = [
                executor.submit(_submit, index, document)
                for index, document in enumerate(documents)
            ]
            try:
                for future in as_completed(futures):
                    result = future.result()
                    results[result.index] = result
                    progress.update(1)
            except BaseException:
                for pending in futures:
                    pending.cancel()
                # Releases workers blocked in acquire() before the executor joins them.
                abort.cancel()
                raise
    finally:
        progress.close()
        if cancel is not None:
            cancel.remove_callback(abort.cancel)

    failed = sum(1 for result in results if result is not None and not result.ok)
    logger.info("Submitted %d documents (%d failed)", len(documents), failed)
    return [result for result in results if result is not None]
