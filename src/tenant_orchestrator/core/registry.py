from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from tenant_orchestrator.utils.logger import logger


@dataclass
class TenantRecord:
    tenant_id: str
    container_id: str
    template_id: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class TenantRegistry:
    """In-memory index of tenants (thread-safe).

    Populated on launch and reconciled against the runtime listing, which stays
    the source of truth across orchestrator restarts.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._data: Dict[str, TenantRecord] = {}

    def add(self, record: TenantRecord) -> TenantRecord:
        with self._lock:
            self._data[record.tenant_id] = record
            return record

    def get(self, tenant_id: str) -> Optional[TenantRecord]:
        with self._lock:
            return self._data.get(tenant_id)

    def find_by_container(self, container_id: str) -> Optional[TenantRecord]:
        with self._lock:
            for rec in self._data.values():
                if _same_container(rec.container_id, container_id):
                    return rec
            return None

    def remove_container(self, container_id: str) -> Optional[TenantRecord]:
        with self._lock:
            rec = self.find_by_container(container_id)
            if rec is not None:
                del self._data[rec.tenant_id]
            return rec

    def list_all(self) -> List[TenantRecord]:
        with self._lock:
            return list(self._data.values())

    def reconcile(
        self, observed: Iterable[TenantRecord], listed_at: Optional[datetime] = None
    ) -> List[TenantRecord]:
        """
        Align the index with what the runtime reports.

        Observed tenants missing from the index are adopted; indexed tenants the
        runtime no longer has are dropped. Existing records keep their original
        ``created_at``. Records registered at or after ``listed_at`` are newer
        than the listing and are kept even when not observed.

        Returns:
            The reconciled records, in the order they were observed.
        """
        with self._lock:
            seen: Dict[str, TenantRecord] = {}
            for obs in observed:
                current = self._data.get(obs.tenant_id)
                if current is None or not _same_container(current.container_id, obs.container_id):
                    logger.debug(f"Adopting tenant {obs.tenant_id} (container {obs.container_id[:12]})")
                    current = obs
                seen[obs.tenant_id] = current

            kept = dict(seen)
            for tenant_id in set(self._data) - set(seen):
                rec = self._data[tenant_id]
                if listed_at is not None and rec.created_at >= listed_at:
                    kept[tenant_id] = rec
                    continue
                logger.info(f"Tenant {tenant_id} no longer present in runtime, dropping from index")

            self._data = kept
            return list(seen.values())


def _same_container(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return a.startswith(b) or b.startswith(a)
