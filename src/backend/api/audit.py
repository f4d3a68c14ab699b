from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from common.expense_audit.catalog import (
    build_kind_catalog,
    dump_request_types,
    load_request_types,
    load_rule_catalog,
)
from common.expense_audit.errors import RuleCatalogError
from common.expense_audit.evaluator import AuditEvaluator
from common.expense_audit.linkage import active_rule_ids_for, migrate_linkage
from common.expense_audit.models import AuditResult, Document
from pipelines.config import get_engine_config


router = APIRouter(prefix="/audit", tags=["audit"])


class EvaluateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document: Document
    rules: list[dict[str, Any]]
    request_types: list[dict[str, Any]] = Field(default_factory=list, alias="requestTypes")
    request_type: Optional[str] = Field(default=None, alias="requestType")


class MigrateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rules: list[dict[str, Any]]
    request_types: list[dict[str, Any]] = Field(alias="requestTypes")


def _evaluator() -> AuditEvaluator:
    return AuditEvaluator(weights=get_engine_config().weights)


@router.post("/evaluate", response_model=AuditResult)
def audit_evaluate(req: EvaluateRequest):
    try:
        rules = load_rule_catalog(req.rules)
        request_types = migrate_linkage(load_request_types(req.request_types), rules)
    except RuleCatalogError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    active = None
    if req.request_type is not None:
        active = active_rule_ids_for(req.request_type, request_types)
    return _evaluator().evaluate(req.document, rules, active)


@router.post("/linkage/migrate")
def audit_migrate_linkage(req: MigrateRequest):
    try:
        rules = load_rule_catalog(req.rules)
        request_types = load_request_types(req.request_types)
    except RuleCatalogError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"requestTypes": dump_request_types(migrate_linkage(request_types, rules))}


@router.get("/kinds")
def audit_kinds():
    return [entry.model_dump() for entry in build_kind_catalog(get_engine_config().weights)]
