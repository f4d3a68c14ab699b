from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from common.expense_audit.evaluator import AuditEvaluator
from common.expense_audit.linkage import active_rule_ids_for
from common.expense_audit.models import AuditResult, Document

from .catalog_store import CatalogInputs


class Submission(BaseModel):
    reference: str = ""
    request_type: str = ""
    document: Document


class SubmissionAudit(BaseModel):
    reference: str
    request_type: str
    # Sorted copy of the category's linked ids; None when no restriction applied.
    active_rule_ids: Optional[List[str]] = None
    result: AuditResult


class AuditRunReport(BaseModel):
    run_id: str
    generated_at: datetime

    audits: List[SubmissionAudit] = Field(default_factory=list)
    totals: dict[str, int] = Field(default_factory=dict)


def audit_submissions(
    submissions: Iterable[Submission],
    catalogs: CatalogInputs,
    *,
    evaluator: Optional[AuditEvaluator] = None,
) -> AuditRunReport:
    evaluator = evaluator or AuditEvaluator()
    audits: list[SubmissionAudit] = []
    for submission in submissions:
        active = active_rule_ids_for(submission.request_type, catalogs.request_types)
        result = evaluator.evaluate(submission.document, catalogs.rules, active)
        audits.append(
            SubmissionAudit(
                reference=submission.reference,
                request_type=submission.request_type,
                active_rule_ids=sorted(active) if active is not None else None,
                result=result,
            )
        )

    totals = {"passed": 0, "flagged": 0}
    for audit in audits:
        totals["passed" if audit.result.passed else "flagged"] += 1

    return AuditRunReport(
        run_id=str(uuid.uuid4()),
        generated_at=datetime.now(timezone.utc),
        audits=audits,
        totals=totals,
    )
