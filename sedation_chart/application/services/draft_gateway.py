from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Literal

from sedation_chart.application.iv_sedation_mapper import build_draft_payload
from sedation_chart.application.notifications import Notifier, RecordingNotifier
from sedation_chart.config import settings
from sedation_chart.domain.models.iv_sedation import PatientContext, SedationFieldRegistry
from sedation_chart.infrastructure.db.remote_store import IV_SEDATION_TABLE, RemoteStore

logger = logging.getLogger(__name__)

SaveStatus = Literal["idle", "saving", "saved", "error"]
Dispatcher = Callable[[Callable[[], None]], None]

SAVE_FAILED_MESSAGE = "Failed to save draft"


def run_inline(job: Callable[[], None]) -> None:
    job()


class DraftPersistenceGateway:
    """Turns field deltas into draft create/update calls for one open form.

    Writes for a single form are serialized by ``lock``: the first successful
    save creates the draft and every later one updates it by id. Each call gets
    a sequence number and only the newest one may settle the visible status.
    Fields whose latest save failed are handed to ``on_save_failed`` so the
    caller can send them again, and stay counted in ``has_unsaved_changes``
    until a later save carries them through.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        patient: PatientContext,
        registry: SedationFieldRegistry,
        notifier: Notifier | None = None,
        dispatcher: Dispatcher = run_inline,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        error_display_seconds: float | None = None,
        current_draft_id: str | None = None,
        records: list[dict[str, Any]] | None = None,
        on_state_changed: Callable[[], None] | None = None,
        on_save_failed: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self.store = store
        self.patient = patient
        self.registry = registry
        self.notifier = notifier or RecordingNotifier()
        self.dispatcher = dispatcher
        self.clock = clock
        self.now = now
        self.error_display_seconds = (
            settings.save_error_display_seconds if error_display_seconds is None else error_display_seconds
        )
        self.current_draft_id = current_draft_id
        self.records: list[dict[str, Any]] = records if records is not None else []
        self.on_state_changed = on_state_changed
        self.on_save_failed = on_save_failed
        self.lock = threading.RLock()
        self._state_lock = threading.Lock()
        self._status: SaveStatus = "idle"
        self._error_until: float | None = None
        self._sequence = 0
        # Field name -> sequence of the newest save that carries it.
        self._field_sequence: dict[str, int] = {}
        self._unsaved: set[str] = set()
        self._closed = False
        self.last_saved_at: datetime | None = None

    @property
    def save_status(self) -> SaveStatus:
        with self._state_lock:
            if self._status == "error" and self._error_until is not None and self.clock() >= self._error_until:
                self._status = "idle"
                self._error_until = None
            return self._status

    @property
    def has_unsaved_changes(self) -> bool:
        with self._state_lock:
            return bool(self._unsaved)

    @property
    def is_edit_mode(self) -> bool:
        return self.current_draft_id is not None

    @property
    def visible_last_saved(self) -> datetime | None:
        if self.save_status == "saving":
            return None
        return self.last_saved_at

    def last_saved_label(self) -> str:
        saved_at = self.visible_last_saved
        if saved_at is None:
            return ""
        return f"Last saved {saved_at.strftime('%H:%M:%S')}"

    def auto_save(self, updates: Mapping[str, Any]) -> int | None:
        if not updates or self._closed:
            return None
        updates = dict(updates)
        payload = build_draft_payload(updates, registry=self.registry, patient=self.patient)
        with self._state_lock:
            self._sequence += 1
            sequence = self._sequence
            self._status = "saving"
            self._error_until = None
            for name in updates:
                self._field_sequence[name] = sequence
                self._unsaved.add(name)
        self._changed()
        self.dispatcher(lambda: self._persist(sequence, updates, payload))
        return sequence

    def _persist(self, sequence: int, updates: dict[str, Any], payload: dict[str, Any]) -> None:
        with self.lock:
            if self._closed:
                logger.debug("Dropping save %s for a closed form", sequence)
                return
            try:
                if self.current_draft_id is None:
                    record = self.store.create(IV_SEDATION_TABLE, payload)
                    self.current_draft_id = str(record["id"])
                    logger.info("Created IV sedation draft %s", self.current_draft_id)
                else:
                    record = self.store.update(IV_SEDATION_TABLE, self.current_draft_id, payload)
            except Exception:  # noqa: BLE001
                logger.exception("Draft save failed (request %s)", sequence)
                self._settle_failure(sequence, updates)
                return
            self.upsert_record(record)
            self._settle_success(sequence)

    def _settle_success(self, sequence: int) -> None:
        with self._state_lock:
            self._unsaved -= self._fields_last_sent_by(sequence)
            if sequence != self._sequence:
                logger.debug("Ignoring stale save response %s", sequence)
                return
            self._status = "saved"
            self._error_until = None
            self.last_saved_at = self.now().replace(microsecond=0)
        self._changed()

    def _settle_failure(self, sequence: int, updates: dict[str, Any]) -> None:
        self.notifier.notify("error", SAVE_FAILED_MESSAGE)
        with self._state_lock:
            # Fields resent by a newer save are that save's concern.
            retry = {name: updates[name] for name in self._fields_last_sent_by(sequence)}
            newest = sequence == self._sequence
            if newest:
                self._status = "error"
                self._error_until = self.clock() + self.error_display_seconds
        if newest:
            self._changed()
        if retry and self.on_save_failed is not None:
            self.on_save_failed(retry)

    def _fields_last_sent_by(self, sequence: int) -> set[str]:
        return {name for name, last in self._field_sequence.items() if last == sequence}

    def upsert_record(self, record: Mapping[str, Any]) -> None:
        record = dict(record)
        with self._state_lock:
            for index, item in enumerate(self.records):
                if item.get("id") == record.get("id"):
                    self.records[index] = record
                    return
            self.records.insert(0, record)

    def close(self) -> None:
        """Detach from the draft; saves still queued for this form are dropped."""
        with self.lock:
            self._closed = True
            self.current_draft_id = None

    def _changed(self) -> None:
        if self.on_state_changed is not None:
            self.on_state_changed()
