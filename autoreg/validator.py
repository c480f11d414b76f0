"""Subtype checks between implementations and the contracts they claim."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Sequence, Set

from .models import Declaration, SymbolTable

_OBJECT = "java.lang.Object"


@dataclass(frozen=True)
class ContractMismatch:
    """Why a candidate was excluded from a contract's registry."""

    candidate: str
    contract: str
    reason: str


@dataclass(frozen=True)
class ContractCheck:
    """Outcome of validating one candidate against one contract."""

    candidate: str
    contract: str
    mismatch: Optional[ContractMismatch] = None

    @property
    def accepted(self) -> bool:
        return self.mismatch is None


class ContractValidator:
    """Checks that a candidate is a subtype of its contract.

    Only the subtype relationship is enforced. Constructors, visibility and
    abstractness are the runtime loader's business.
    """

    def __init__(self, symbols: SymbolTable) -> None:
        self._symbols = symbols

    def check(self, candidate: Declaration, contract: str) -> ContractCheck:
        if self._reaches(candidate.name, candidate.supertypes, contract):
            return ContractCheck(candidate=candidate.name, contract=contract)
        return ContractCheck(
            candidate=candidate.name,
            contract=contract,
            mismatch=ContractMismatch(
                candidate=candidate.name,
                contract=contract,
                reason=f"{candidate.name} does not implement or extend {contract}",
            ),
        )

    def is_valid_implementation(self, candidate: Declaration, contract: str) -> bool:
        return self.check(candidate, contract).accepted

    def _reaches(self, name: str, supertypes: Sequence[str], contract: str) -> bool:
        if name == contract or contract == _OBJECT:
            return True
        seen: Set[str] = {name, *supertypes}
        queue: Deque[str] = deque(supertypes)
        while queue:
            current = queue.popleft()
            if current == contract:
                return True
            declaration = self._symbols.get(current)
            if declaration is None:
                continue
            for supertype in declaration.supertypes:
                if supertype not in seen:
                    seen.add(supertype)
                    queue.append(supertype)
        return False


__all__ = ["ContractCheck", "ContractMismatch", "ContractValidator"]
