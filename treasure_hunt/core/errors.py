# treasure_hunt/core/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

from treasure_hunt.core.types import Position


@dataclass(eq=False)
class SolveError(Exception):
    """A solve that cannot produce a result; carries a stable code for the UI."""

    code: ClassVar[str] = "solve_error"

    message: str
    detail: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.detail:
            return f"{base}: {self.detail}"
        return base

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class ConfigurationError(SolveError):
    """Missing start/goal/treasures or too many treasures. Raised before any search."""

    code = "configuration"


@dataclass(eq=False)
class UnreachableError(SolveError):
    """A treasure cannot be reached from start or cannot reach the goal."""

    code: ClassVar[str] = "unreachable"

    positions: List[Position] = field(default_factory=list)


class InfeasibleRouteError(SolveError):
    """No treasure ordering has a finite total distance."""

    code = "infeasible_route"


__all__ = ["SolveError", "ConfigurationError", "UnreachableError", "InfeasibleRouteError"]
