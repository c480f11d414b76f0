"""Processor that writes one service provider file per contract."""

from __future__ import annotations

from ..logging import get_logger
from ..markers import SERVICE_VALUE_PROPERTY
from ..registry import RegistryAccumulator
from ..validator import ContractValidator
from ..values import ValueExtractor
from .base import ProcessingEnvironment, Processor, RoundEnvironment


class AutoServiceProcessor(Processor):
    """Registers declarations carrying the service marker as providers of its contracts.

    Contracts come from the marker's ``value`` property (one class literal or
    an array of them). A provider that is not a subtype of a contract is
    left out of that contract's file without failing the build.
    """

    def __init__(self) -> None:
        self.logger = get_logger("processors.services")

    def init(self, env: ProcessingEnvironment) -> None:
        super().init(env)
        self._values = ValueExtractor(env.symbols)
        self._validator = ContractValidator(env.symbols)

    def process(self, round_env: RoundEnvironment, accumulator: RegistryAccumulator) -> None:
        for declaration in round_env.declarations:
            for usage in declaration.usages_of(self.env.service_marker):
                for contract in self._values.type_refs(usage, SERVICE_VALUE_PROPERTY):
                    check = self._validator.check(declaration, contract)
                    if not check.accepted:
                        self.logger.debug("Excluded: %s", check.mismatch.reason)  # type: ignore[union-attr]
                        continue
                    accumulator.record_service(contract, declaration.name)


__all__ = ["AutoServiceProcessor"]
