"""Scenario replay — drive one election from a JSON script.

Scenario format:

    {
      "chairperson": "0xchair",
      "proposals": ["Proposal 1", "Proposal 2"],
      "operations": [
        {"op": "give_right_to_vote", "caller": "0xchair", "voter": "0xalice"},
        {"op": "delegate", "caller": "0xalice", "to": "0xchair"},
        {"op": "vote", "caller": "0xchair", "proposal": 1}
      ]
    }

chairperson and proposals are optional and fall back to the loaded
BallotConfig. Operations are validated when the file is loaded, so a
malformed scenario never runs half-way.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ballot.config import BallotConfig
from ballot.service import BallotService, ServiceResult

# op name → required fields
OPERATION_FIELDS: dict[str, tuple[str, ...]] = {
    "give_right_to_vote": ("caller", "voter"),
    "delegate": ("caller", "to"),
    "vote": ("caller", "proposal"),
}

# Fields naming an account; must be non-empty strings.
IDENTITY_FIELDS = frozenset({"caller", "voter", "to"})


@dataclass(frozen=True)
class Operation:
    """One scripted call."""
    op: str
    args: dict[str, Any]


@dataclass(frozen=True)
class Scenario:
    chairperson: Optional[str] = None
    proposals: Optional[tuple[str, ...]] = None
    operations: tuple[Operation, ...] = field(default_factory=tuple)

    def build_service(self, config: BallotConfig) -> BallotService:
        """Open a fresh election, scenario values taking precedence."""
        return BallotService(
            self.chairperson or config.chairperson,
            list(self.proposals or config.proposals),
        )


def _is_identity(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def parse_operation(raw: Any, position: int) -> Operation:
    if not isinstance(raw, dict):
        raise ValueError(f"operation {position}: expected an object")
    op = raw.get("op")
    if op not in OPERATION_FIELDS:
        raise ValueError(
            f"operation {position}: unknown op {op!r} "
            f"(expected one of {', '.join(sorted(OPERATION_FIELDS))})"
        )
    missing = [name for name in OPERATION_FIELDS[op] if name not in raw]
    if missing:
        raise ValueError(
            f"operation {position} ({op}): missing {', '.join(missing)}"
        )
    for name in OPERATION_FIELDS[op]:
        if name in IDENTITY_FIELDS and not _is_identity(raw[name]):
            raise ValueError(
                f"operation {position} ({op}): {name} must be a non-empty string"
            )
    return Operation(op=op, args={name: raw[name] for name in OPERATION_FIELDS[op]})


def parse_scenario(data: dict[str, Any]) -> Scenario:
    if not isinstance(data, dict):
        raise ValueError("scenario must be a JSON object")
    chairperson = data.get("chairperson")
    if chairperson is not None and not _is_identity(chairperson):
        raise ValueError("chairperson must be a non-empty string")
    proposals = data.get("proposals")
    if proposals is not None:
        if not isinstance(proposals, list) or not proposals:
            raise ValueError("proposals must be a non-empty list")
        proposals = tuple(str(p) for p in proposals)
    operations = data.get("operations", [])
    if not isinstance(operations, list):
        raise ValueError("operations must be a list")
    return Scenario(
        chairperson=chairperson,
        proposals=proposals,
        operations=tuple(
            parse_operation(raw, i) for i, raw in enumerate(operations, 1)
        ),
    )


def load_scenario(path: Path) -> Scenario:
    with path.open("r", encoding="utf-8") as handle:
        return parse_scenario(json.load(handle))


def run_scenario(service: BallotService, scenario: Scenario) -> list[ServiceResult]:
    """Apply every operation in order. Rejections do not stop the run."""
    results: list[ServiceResult] = []
    for operation in scenario.operations:
        handler = getattr(service, operation.op)
        results.append(handler(**operation.args))
    return results
