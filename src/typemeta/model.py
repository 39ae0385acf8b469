# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for extraction results."""

from dataclasses import dataclass, field
from typing import Literal

UnitKind = Literal["record", "client", "method", "parameter"]
OutcomeStatus = Literal["recorded", "skipped", "failed"]


@dataclass
class FunctionRecord:
    """Represent the signature of one remote method.

    Attributes:
        parameters: Parameter name to type kind text.
        return_type: Return type signature; empty when unresolved.
    """

    parameters: dict[str, str] = field(default_factory=dict)
    return_type: str = ""

    def add_parameter(self, name: str, type_: str) -> None:
        self.parameters[name] = type_

    def set_return_type(self, type_: str) -> None:
        self.return_type = type_

    def to_dict(self) -> dict[str, object]:
        """Render the record in its JSON shape."""
        return {"parameters": dict(self.parameters), "returnType": self.return_type}


@dataclass(frozen=True)
class ExtractionOutcome:
    """Represent what happened to one extraction unit.

    Attributes:
        unit: Granularity of the unit (record, client, method or parameter).
        name: Resolved or declared name of the unit when known.
        status: ``recorded``, ``skipped`` (resolution miss) or ``failed``.
        reason: Short machine-friendly reason, empty for recorded units.
    """

    unit: UnitKind
    name: str | None
    status: OutcomeStatus
    reason: str = ""
