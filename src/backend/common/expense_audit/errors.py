from __future__ import annotations


class ExpenseAuditError(ValueError):
    pass


class RuleNotFoundError(ExpenseAuditError):
    pass


class RequestTypeNotFoundError(ExpenseAuditError):
    pass


class DuplicateRequestTypeError(ExpenseAuditError):
    pass


class RuleCatalogError(ExpenseAuditError):
    pass


class DuplicateRuleError(ExpenseAuditError):
    pass
