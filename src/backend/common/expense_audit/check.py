from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Document, Rule


class RuleCheck(ABC):
    kind: str
    title: str
    threshold_semantics: str

    def __init__(self):
        if not getattr(self, "kind", None):
            raise ValueError("RuleCheck must define kind")

    @abstractmethod
    def is_violation(self, rule: Rule, document: Document) -> bool:  # pragma: no cover
        raise NotImplementedError
