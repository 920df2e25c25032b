"""Bounded concurrent image enrichment.

``enrich`` pairs every record with its image bytes.  Fetches run on a thread
pool behind a counting gate of ``concurrency_limit`` slots; results land in
the slot matching the record's input position, whatever order the fetches
finish in.  A failed fetch leaves that slot's image empty and never touches
its siblings.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from agrihub.errors import FetchError
from agrihub.images.resolver import resolve

T = TypeVar("T")

DEFAULT_CONCURRENCY = 20


@dataclass
class EnrichedRecord(Generic[T]):
    """A record plus its image bytes (``b""`` means no image)."""

    record: T
    image_bytes: bytes = b""

    @property
    def has_image(self) -> bool:
        return bool(self.image_bytes)


def enrich(
    records: Sequence[T],
    extract_reference: Callable[[T], Optional[str]],
    fetch: Callable[[str], bytes],
    *,
    concurrency_limit: int = DEFAULT_CONCURRENCY,
    resolve_reference: Callable[[str], str] = resolve,
    describe: Optional[Callable[[T], str]] = None,
    cancel: Optional[threading.Event] = None,
) -> list[EnrichedRecord[T]]:
    """Resolve and fetch each record's image with at most *concurrency_limit* in flight.

    Args:
        records: Input records; the output mirrors their order and length.
        extract_reference: Returns the record's image reference, or
            ``None``/``""`` when it has none.
        fetch: Fetches a resolved URL, raising :class:`FetchError` on failure.
        concurrency_limit: Size of the gate.
        resolve_reference: Reference → URL conversion.
        describe: Labels a record in log lines (defaults to its index).
        cancel: When set, tasks that have not yet entered the gate are
            skipped; their slots keep an empty image.

    Returns:
        One :class:`EnrichedRecord` per input record, same positions.
    """
    if concurrency_limit < 1:
        raise ValueError("concurrency_limit must be >= 1")

    results = [EnrichedRecord(record=r) for r in records]

    pending: list[tuple[int, str]] = []
    for index, record in enumerate(records):
        reference = extract_reference(record)
        if reference:
            pending.append((index, reference))

    if not pending:
        return results

    gate = threading.BoundedSemaphore(concurrency_limit)
    write_lock = threading.Lock()

    def label(index: int) -> str:
        return describe(records[index]) if describe else f"#{index}"

    def task(index: int, reference: str) -> None:
        if cancel is not None and cancel.is_set():
            return
        with gate:
            if cancel is not None and cancel.is_set():
                return
            url = resolve_reference(reference)
            try:
                data = fetch(url)
            except FetchError as exc:
                print(f"[IMAGE] ✗ {label(index)}: {exc}")
                return
        with write_lock:
            results[index].image_bytes = data

    workers = min(len(pending), concurrency_limit)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        future_to_index = {
            pool.submit(task, index, reference): index for index, reference in pending
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                future.result()
            except Exception as exc:
                print(f"[IMAGE] ✗ {label(index)}: unexpected error: {exc!r}")

    return results
