"""Batch loader with concurrent decoding and a settle barrier.

Every accepted blob of a batch is decoded on a worker thread. Outcomes are
kept per slot, keyed by the blob's position in the batch, and the batch is
published through ``batch_settled`` only once every slot has resolved. The
published handles are therefore always in submission order, whatever order
the decodes finished in.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial

import numpy as np
from PySide6.QtCore import QObject, Signal

from image_browser.image_engine.decoder import (
    DecodeFailure,
    FileBlob,
    ImageHandle,
    decode_blob,
    is_image_media_type,
)
from image_browser.logger import get_logger

_logger = get_logger("loader")

DecodeFn = Callable[[FileBlob], tuple[str, "np.ndarray | None", "str | None"]]
SlotOutcome = ImageHandle | DecodeFailure


@dataclass(frozen=True)
class BatchOutcome:
    """Settled result of one batch, in submission order."""

    batch_id: int
    handles: tuple[ImageHandle, ...] = ()
    failures: tuple[DecodeFailure, ...] = ()
    skipped: tuple[str, ...] = ()


@dataclass
class PendingBatch:
    """Per-slot outcomes of a batch that has not settled yet."""

    batch_id: int
    size: int
    skipped: tuple[str, ...] = ()
    slots: list[SlotOutcome | None] = field(default_factory=list)
    remaining: int = 0

    def __post_init__(self) -> None:
        self.slots = [None] * self.size
        self.remaining = self.size

    @property
    def settled(self) -> bool:
        return self.remaining == 0

    def record(self, position: int, outcome: SlotOutcome) -> bool:
        """Store the outcome for ``position``; return True when the batch just settled."""
        if self.slots[position] is not None:
            _logger.warning("batch %s slot %s resolved twice; keeping first outcome", self.batch_id, position)
            return False
        self.slots[position] = outcome
        self.remaining -= 1
        return self.remaining == 0

    def outcome(self) -> BatchOutcome:
        handles = tuple(s for s in self.slots if isinstance(s, ImageHandle))
        failures = tuple(s for s in self.slots if isinstance(s, DecodeFailure))
        return BatchOutcome(self.batch_id, handles, failures, self.skipped)


class BatchLoader(QObject):
    """Submit batches of blobs for concurrent decoding.

    The decode_fn must be of the form: (blob) -> (name, array|None, error|None)
    """

    batch_settled = Signal(object)  # BatchOutcome

    def __init__(self, decode_fn: DecodeFn = decode_blob, max_workers: int = 4, parent: QObject | None = None):
        super().__init__(parent)
        self._decode_fn = decode_fn
        self._max_workers = max(1, int(max_workers))
        self.executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="decode")
        self._pending: dict[int, PendingBatch] = {}
        self._next_id = 1
        self._closed = False
        self._lock = threading.Lock()
        _logger.debug("BatchLoader init: workers=%s", self._max_workers)

    def submit_batch(self, blobs: Iterable[FileBlob]) -> int:
        accepted: list[FileBlob] = []
        skipped: list[str] = []
        for blob in blobs:
            if is_image_media_type(blob.media_type):
                accepted.append(blob)
            else:
                _logger.debug("skip non-image: name=%s type=%s", blob.name, blob.media_type)
                skipped.append(blob.name)

        with self._lock:
            batch_id = self._next_id
            self._next_id += 1
            pending = PendingBatch(batch_id, len(accepted), tuple(skipped))
            if accepted:
                self._pending[batch_id] = pending

        _logger.debug("submit_batch: id=%s accepted=%s skipped=%s", batch_id, len(accepted), len(skipped))

        if not accepted:
            self.batch_settled.emit(pending.outcome())
            return batch_id

        for position, blob in enumerate(accepted):
            try:
                future = self.executor.submit(self._decode_one, position, blob)
            except Exception as e:
                _logger.exception("submit decode failed for %s", blob.name)
                self._resolve(batch_id, position, DecodeFailure(position, blob.name, str(e)))
                continue
            future.add_done_callback(partial(self._on_decode_finished, batch_id, position, blob.name))
        return batch_id

    def _decode_one(self, position: int, blob: FileBlob) -> SlotOutcome:
        name, data, error = self._decode_fn(blob)
        if error or data is None:
            return DecodeFailure(position, name, error or "decoder returned no data")
        return ImageHandle(name, blob.media_type, data)

    def _on_decode_finished(self, batch_id: int, position: int, name: str, future: Future) -> None:
        # Runs on the worker thread (or the submitting thread if already done).
        try:
            outcome = future.result()
        except Exception as e:
            _logger.debug("decode future failed: batch=%s name=%s: %s", batch_id, name, e)
            outcome = DecodeFailure(position, name, str(e) or type(e).__name__)
        self._resolve(batch_id, position, outcome)

    def _resolve(self, batch_id: int, position: int, outcome: SlotOutcome) -> None:
        with self._lock:
            pending = self._pending.get(batch_id)
            if pending is None:
                _logger.debug("resolve dropped: batch=%s pos=%s (not pending)", batch_id, position)
                return
            if not pending.record(position, outcome):
                return
            del self._pending[batch_id]
            closed = self._closed
        if closed:
            _logger.debug("batch %s settled after shutdown (dropped)", batch_id)
            return
        result = pending.outcome()
        _logger.debug(
            "batch settled: id=%s ok=%s failed=%s",
            batch_id,
            len(result.handles),
            len(result.failures),
        )
        self.batch_settled.emit(result)

    def pending_batches(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            self._pending.clear()
        self.executor.shutdown(wait=False, cancel_futures=True)
