from __future__ import annotations

from dataclasses import dataclass

from sedation_chart.application.services.iv_sedation_service import IvSedationService
from sedation_chart.domain.models.medication_catalog import DEFAULT_CATALOG, MedicationCatalog
from sedation_chart.infrastructure.db.remote_store import SqlRemoteStore
from sedation_chart.infrastructure.db.session import SessionFactory, session_scope


@dataclass
class Container:
    store: SqlRemoteStore
    catalog: MedicationCatalog
    iv_sedation_service: IvSedationService


def build_container(session_factory: SessionFactory = session_scope) -> Container:
    store = SqlRemoteStore(session_factory=session_factory)
    catalog = DEFAULT_CATALOG
    iv_sedation_service = IvSedationService(store=store, catalog=catalog)
    return Container(store=store, catalog=catalog, iv_sedation_service=iv_sedation_service)
