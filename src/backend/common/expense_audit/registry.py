from __future__ import annotations

from typing import Dict, Iterable, Type

from .check import RuleCheck
from .models import kind_key


class CheckRegistry:
    def __init__(self):
        self._checks: Dict[str, Type[RuleCheck]] = {}

    def register(self, check_cls: Type[RuleCheck]) -> None:
        kind = getattr(check_cls, "kind", None)
        if not kind:
            raise ValueError("Check class missing kind")
        key = kind_key(kind)
        if key in self._checks:
            raise ValueError(f"Duplicate check registered for kind: {key}")
        self._checks[key] = check_cls

    def create_all(self) -> list[RuleCheck]:
        return [cls() for cls in self._checks.values()]

    def get(self, kind: str) -> Type[RuleCheck]:
        return self._checks[kind_key(kind)]

    def kinds(self) -> Iterable[str]:
        return self._checks.keys()


registry = CheckRegistry()


def register_check(check_cls: Type[RuleCheck]) -> Type[RuleCheck]:
    registry.register(check_cls)
    return check_cls
