from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from sedation_chart.domain.models.iv_sedation import FlowEntry


def add_entry(entries: Sequence[FlowEntry], entry: FlowEntry) -> list[FlowEntry]:
    return [*entries, entry]


def update_entry(entries: Sequence[FlowEntry], entry_id: str, entry: FlowEntry) -> list[FlowEntry]:
    return [replace(entry, id=entry_id) if item.id == entry_id else item for item in entries]


def remove_entry(entries: Sequence[FlowEntry], entry_id: str) -> list[FlowEntry]:
    return [item for item in entries if item.id != entry_id]


def join_blood_pressure(systolic: str, diastolic: str) -> str:
    systolic = systolic.strip()
    diastolic = diastolic.strip()
    if not systolic and not diastolic:
        return ""
    return f"{systolic}/{diastolic}"


def split_blood_pressure(bp: str) -> tuple[str, str]:
    text = (bp or "").strip()
    if not text:
        return "", ""
    systolic, _, diastolic = text.partition("/")
    return systolic.strip(), diastolic.strip()


@dataclass(slots=True)
class FlowEntryBuffer:
    time: str = ""
    systolic: str = ""
    diastolic: str = ""
    heart_rate: str = ""
    rr: str = ""
    spo2: str = ""
    medications: list[str] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: FlowEntry) -> FlowEntryBuffer:
        systolic, diastolic = split_blood_pressure(entry.bp)
        return cls(
            time=entry.time,
            systolic=systolic,
            diastolic=diastolic,
            heart_rate=entry.heart_rate,
            rr=entry.rr,
            spo2=entry.spo2,
            medications=list(entry.medications),
        )

    @property
    def can_confirm(self) -> bool:
        return bool(self.time.strip())

    def to_entry(self, entry_id: str) -> FlowEntry:
        return FlowEntry(
            id=entry_id,
            time=self.time.strip(),
            bp=join_blood_pressure(self.systolic, self.diastolic),
            heart_rate=self.heart_rate.strip(),
            rr=self.rr.strip(),
            spo2=self.spo2.strip(),
            medications=list(self.medications),
        )
