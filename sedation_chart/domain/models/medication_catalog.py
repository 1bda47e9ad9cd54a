from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Medication:
    id: str
    display_name: str
    category: str


class MedicationCatalog:
    """Read-only id -> medication lookup used by the monitoring log."""

    def __init__(self, medications: Iterable[Medication]) -> None:
        self._items: dict[str, Medication] = {}
        for item in medications:
            self._items.setdefault(item.id, item)

    def __iter__(self) -> Iterator[Medication]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, medication_id: object) -> bool:
        return medication_id in self._items

    def get(self, medication_id: str) -> Medication | None:
        return self._items.get(medication_id)

    def label_for(self, medication_id: str) -> str:
        item = self.get(medication_id)
        return item.display_name if item else medication_id

    def labels_for(self, medication_ids: Iterable[str]) -> list[str]:
        return [self.label_for(item) for item in medication_ids]

    def by_category(self) -> dict[str, list[Medication]]:
        grouped: dict[str, list[Medication]] = {}
        for item in self._items.values():
            grouped.setdefault(item.category, []).append(item)
        return grouped


DEFAULT_MEDICATIONS: tuple[Medication, ...] = (
    Medication("midazolam", "Midazolam (Versed)", "Sedative"),
    Medication("propofol", "Propofol (Diprivan)", "Sedative"),
    Medication("ketamine", "Ketamine", "Sedative"),
    Medication("fentanyl", "Fentanyl", "Opioid"),
    Medication("meperidine", "Meperidine (Demerol)", "Opioid"),
    Medication("flumazenil", "Flumazenil (Romazicon)", "Reversal agent"),
    Medication("naloxone", "Naloxone (Narcan)", "Reversal agent"),
    Medication("ondansetron", "Ondansetron (Zofran)", "Antiemetic"),
    Medication("dexamethasone", "Dexamethasone (Decadron)", "Steroid"),
    Medication("glycopyrrolate", "Glycopyrrolate (Robinul)", "Anticholinergic"),
    Medication("diphenhydramine", "Diphenhydramine (Benadryl)", "Antihistamine"),
    Medication("ketorolac", "Ketorolac (Toradol)", "Analgesic"),
    Medication("cefazolin", "Cefazolin (Ancef)", "Antibiotic"),
    Medication("clindamycin", "Clindamycin (Cleocin)", "Antibiotic"),
    Medication("lactated_ringers", "Lactated Ringer's", "IV fluid"),
)

DEFAULT_CATALOG = MedicationCatalog(DEFAULT_MEDICATIONS)
