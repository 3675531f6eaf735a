"""Matter management, matter detail and dashboard summary"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError, RecordNotFoundError
from jurisai.models import (
    Argument,
    Document,
    LegalAuthority,
    LegalIssue,
    Matter,
    MatterStatus,
    MatterType,
    coerce_choice,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "name", "client", "court", "matter_type", "status",
    "description", "case_number", "opposing_party",
}


class MatterDetail(BaseModel):
    matter: Matter
    authorities: List[LegalAuthority] = []
    issues: List[LegalIssue] = []
    arguments: List[Argument] = []
    documents: List[Document] = []


class DashboardSummary(BaseModel):
    active_matters: int = 0
    total_authorities: int = 0
    recent_matters: List[Matter] = []
    recent_authorities: List[LegalAuthority] = []
    recent_documents: List[Document] = []


class MatterService:
    def __init__(self, store: EntityStore):
        self.store = store

    def create_matter(self, **fields) -> Matter:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ActionValidationError(f"Unknown matter fields: {', '.join(sorted(unknown))}")
        if not (fields.get("name") or "").strip():
            raise ActionValidationError("Matter name is required")
        fields["matter_type"] = coerce_choice(
            MatterType, fields.get("matter_type") or MatterType.CIVIL_LITIGATION, "matter type"
        )
        fields["status"] = coerce_choice(
            MatterStatus, fields.get("status") or MatterStatus.ACTIVE, "status"
        )
        matter = Matter(**{k: v for k, v in fields.items() if v is not None})
        record = self.store.create(
            "Matter", matter.model_dump(mode="json", exclude={"id", "created_date", "updated_date"})
        )
        saved = Matter.model_validate(record)
        logger.info(f"Created matter '{saved.name}' ({saved.id})")
        return saved

    def update_matter(self, matter_id: str, **fields) -> Matter:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ActionValidationError(f"Unknown matter fields: {', '.join(sorted(unknown))}")
        partial = {k: v for k, v in fields.items() if v is not None}
        if "name" in partial and not partial["name"].strip():
            raise ActionValidationError("Matter name is required")
        if "matter_type" in partial:
            partial["matter_type"] = coerce_choice(MatterType, partial["matter_type"], "matter type").value
        if "status" in partial:
            partial["status"] = coerce_choice(MatterStatus, partial["status"], "status").value
        return Matter.model_validate(self.store.update("Matter", matter_id, partial))

    def get_matter(self, matter_id: str) -> Matter:
        record = self.store.get("Matter", matter_id)
        if record is None:
            raise RecordNotFoundError("Matter", matter_id)
        return Matter.model_validate(record)

    def list_matters(
        self,
        status: Optional[str] = None,
        matter_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Matter]:
        """Matters, most recently updated first, filtered by status, type and free text."""
        criteria = {}
        if status and status != "all":
            criteria["status"] = coerce_choice(MatterStatus, status, "status").value
        if matter_type and matter_type != "all":
            criteria["matter_type"] = coerce_choice(MatterType, matter_type, "matter type").value
        rows = self.store.filter("Matter", criteria, sort="-updated_date")
        matters = [Matter.model_validate(r) for r in rows]
        if search:
            needle = search.lower()
            matters = [
                m for m in matters
                if needle in m.name.lower()
                or needle in m.client.lower()
                or needle in m.case_number.lower()
            ]
        return matters

    def matter_detail(self, matter_id: str) -> MatterDetail:
        matter = self.get_matter(matter_id)
        by_matter = {"matter_id": matter_id}
        return MatterDetail(
            matter=matter,
            authorities=[LegalAuthority.model_validate(r)
                         for r in self.store.filter("LegalAuthority", by_matter, sort="-created_date")],
            issues=[LegalIssue.model_validate(r)
                    for r in self.store.filter("LegalIssue", by_matter, sort="-created_date")],
            arguments=[Argument.model_validate(r)
                       for r in self.store.filter("Argument", by_matter, sort="-version_number")],
            documents=[Document.model_validate(r)
                       for r in self.store.filter("Document", by_matter, sort="-updated_date")],
        )

    def dashboard(self) -> DashboardSummary:
        all_matters = self.store.list("Matter")
        authorities = self.store.list("LegalAuthority", sort="-created_date", limit=10)
        return DashboardSummary(
            active_matters=sum(1 for m in all_matters if m.get("status") == MatterStatus.ACTIVE.value),
            total_authorities=len(self.store.list("LegalAuthority")),
            recent_matters=[Matter.model_validate(r)
                            for r in self.store.list("Matter", sort="-updated_date", limit=5)],
            recent_authorities=[LegalAuthority.model_validate(r) for r in authorities],
            recent_documents=[Document.model_validate(r)
                              for r in self.store.list("Document", sort="-updated_date", limit=5)],
        )
