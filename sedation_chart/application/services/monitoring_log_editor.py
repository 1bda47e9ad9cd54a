from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from sedation_chart.domain.models.iv_sedation import FlowEntry, SedationFieldRegistry
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, MedicationCatalog
from sedation_chart.domain.rules.iv_sedation_calculations import current_time_hhmm
from sedation_chart.domain.rules.iv_sedation_rules import toggle_option
from sedation_chart.domain.rules.monitoring_log import FlowEntryBuffer, add_entry, remove_entry, update_entry


def new_entry_id() -> str:
    return uuid4().hex


class MonitoringLogEditor:
    """Add/edit/remove rows of the monitoring log through a transient buffer.

    The registry list is only replaced on confirm or remove; every such change
    is handed to ``on_entries_changed`` with the whole list.
    """

    def __init__(
        self,
        registry: SedationFieldRegistry,
        *,
        on_entries_changed: Callable[[list[FlowEntry]], None] | None = None,
        catalog: MedicationCatalog = DEFAULT_CATALOG,
        id_factory: Callable[[], str] = new_entry_id,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.registry = registry
        self.on_entries_changed = on_entries_changed
        self.catalog = catalog
        self.id_factory = id_factory
        self.now = now
        self.buffer: FlowEntryBuffer | None = None
        self.editing_id: str | None = None

    @property
    def entries(self) -> list[FlowEntry]:
        return list(self.registry.flow_entries)

    @property
    def is_open(self) -> bool:
        return self.buffer is not None

    def begin_add(self) -> FlowEntryBuffer:
        self.editing_id = None
        self.buffer = FlowEntryBuffer()
        return self.buffer

    def begin_edit(self, entry_id: str) -> FlowEntryBuffer:
        for entry in self.registry.flow_entries:
            if entry.id == entry_id:
                self.editing_id = entry_id
                self.buffer = FlowEntryBuffer.from_entry(entry)
                return self.buffer
        raise ValueError(f"Monitoring entry not found: {entry_id}")

    def stamp_current_time(self) -> str:
        buffer = self._require_buffer()
        buffer.time = current_time_hhmm(self.now())
        return buffer.time

    def toggle_medication(self, medication_id: str) -> list[str]:
        buffer = self._require_buffer()
        buffer.medications = toggle_option(buffer.medications, medication_id)
        return buffer.medications

    def confirm(self) -> FlowEntry | None:
        buffer = self._require_buffer()
        if not buffer.can_confirm:
            return None
        if self.editing_id is None:
            entry = buffer.to_entry(self.id_factory())
            entries = add_entry(self.registry.flow_entries, entry)
        else:
            entry = buffer.to_entry(self.editing_id)
            entries = update_entry(self.registry.flow_entries, self.editing_id, entry)
        self._close()
        self._commit(entries)
        return entry

    def cancel(self) -> None:
        self._close()

    def remove(self, entry_id: str) -> None:
        entries = remove_entry(self.registry.flow_entries, entry_id)
        if len(entries) == len(self.registry.flow_entries):
            return
        if self.editing_id == entry_id:
            self._close()
        self._commit(entries)

    def medication_labels(self, entry: FlowEntry) -> list[str]:
        return self.catalog.labels_for(entry.medications)

    def _commit(self, entries: list[FlowEntry]) -> None:
        self.registry.flow_entries = entries
        if self.on_entries_changed is not None:
            self.on_entries_changed(list(entries))

    def _close(self) -> None:
        self.buffer = None
        self.editing_id = None

    def _require_buffer(self) -> FlowEntryBuffer:
        if self.buffer is None:
            raise ValueError("No monitoring entry is being edited")
        return self.buffer
