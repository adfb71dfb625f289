"""Ballot service — facade over one election ledger.

This is the primary interface for programmatic access. It:
- Builds the ledger (from explicit arguments or a BallotConfig)
- Runs each operation on behalf of a caller identity
- Converts ledger rejections into typed ServiceResults
- Records every accepted and rejected call in the audit event log

The ledger itself never sees the event log; all audit bookkeeping
happens here.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from ballot.config import BallotConfig
from ballot.ledger.election import ElectionLedger
from ballot.ledger.errors import BallotError
from ballot.ledger.invariants import check_ledger, election_events
from ballot.models.identifiers import ProposalName, parse_bytes32_string
from ballot.persistence.event_log import EventKind, EventLog, EventRecord


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class BallotService:
    """Election facade with an audit trail.

    Usage:
        service = BallotService("0xchair", ["Proposal 1", "Proposal 2"])
        service.give_right_to_vote("0xchair", "0xalice")
        result = service.delegate("0xalice", "0xchair")
        result = service.vote("0xchair", 1)
        service.winner_name()  # "Proposal 2"
    """

    def __init__(
        self,
        chairperson: str,
        proposal_names: Sequence[ProposalName],
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._ledger = ElectionLedger(chairperson, proposal_names)
        self._event_log = event_log if event_log is not None else EventLog()
        self._election_id = f"election_{uuid.uuid4().hex[:12]}"
        # Ledger call and its audit append happen as one step.
        self._audit_lock = threading.Lock()
        self._record(
            EventKind.ELECTION_CREATED,
            chairperson,
            {"proposals": [p.label for p in self._ledger.proposals()]},
        )

    @classmethod
    def from_config(
        cls,
        config: BallotConfig,
        event_log: Optional[EventLog] = None,
    ) -> BallotService:
        return cls(config.chairperson, list(config.proposals), event_log=event_log)

    @property
    def ledger(self) -> ElectionLedger:
        return self._ledger

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def election_id(self) -> str:
        return self._election_id

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def give_right_to_vote(self, caller: str, voter: str) -> ServiceResult:
        """Grant voting rights. Only the chairperson may call this."""
        def apply() -> dict[str, Any]:
            self._ledger.give_right_to_vote(caller, voter)
            return {"voter": voter, "weight": 1}

        return self._execute(
            "give_right_to_vote", caller, EventKind.RIGHT_GRANTED, apply,
        )

    def delegate(self, caller: str, to: str) -> ServiceResult:
        """Delegate the caller's weight to another voter."""
        def apply() -> dict[str, Any]:
            outcome = self._ledger.delegate(caller, to)
            data: dict[str, Any] = {
                "delegate_to": outcome.delegate_to,
                "resolved_to": outcome.resolved_to,
                "weight": outcome.weight,
                "credited_weight": outcome.credited_weight,
            }
            if outcome.credited_proposal is not None:
                data["proposal"] = outcome.credited_proposal
            return data

        return self._execute("delegate", caller, EventKind.VOTE_DELEGATED, apply)

    def vote(self, caller: str, proposal: int) -> ServiceResult:
        """Cast the caller's vote for a proposal index."""
        def apply() -> dict[str, Any]:
            weight = self._ledger.vote(caller, proposal)
            return {
                "proposal": proposal,
                "weight": weight,
                "credited_weight": weight,
            }

        return self._execute("vote", caller, EventKind.VOTE_CAST, apply)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def winning_proposal(self) -> int:
        return self._ledger.winning_proposal()

    def winner_name(self) -> str:
        return parse_bytes32_string(self._ledger.winner_name())

    def get_voter(self, address: str) -> dict[str, Any]:
        return self._ledger.voter(address).to_dict()

    def check_invariants(self) -> list[str]:
        with self._audit_lock:
            return check_ledger(
                self._ledger, self._event_log, election_id=self._election_id,
            )

    def status(self) -> dict[str, Any]:
        """Summary of the election suitable for JSON output."""
        with self._audit_lock:
            snapshot = self._ledger.snapshot()
            events = len(election_events(self._event_log, self._election_id))
        winner = snapshot.winning_proposal
        return {
            "chairperson": snapshot.chairperson,
            "proposals": [p.to_dict() for p in snapshot.proposals],
            "voter_count": snapshot.voter_count,
            "total_votes": snapshot.total_votes,
            "winning_proposal": winner,
            "winner_name": snapshot.proposals[winner].label,
            "events": events,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        caller: str,
        kind: EventKind,
        apply: Callable[[], dict[str, Any]],
    ) -> ServiceResult:
        with self._audit_lock:
            try:
                data = apply()
            except BallotError as e:
                self._record(
                    EventKind.CALL_REJECTED,
                    caller,
                    {"operation": operation, "error": e.kind.value, "message": e.message},
                )
                return ServiceResult(
                    success=False,
                    errors=[e.message],
                    data={"error": e.kind.value, "operation": operation},
                )
            event = self._record(kind, caller, data)
        return ServiceResult(
            success=True,
            data={**data, "operation": operation, "event_id": event.event_id},
        )

    def _next_event_id(self) -> str:
        # Counted from the log itself so services sharing a log never collide.
        return f"EVT-{self._event_log.count + 1:08d}"

    def _record(
        self,
        kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
    ) -> EventRecord:
        event = EventRecord.create(
            event_id=self._next_event_id(),
            event_kind=kind,
            actor_id=actor_id,
            payload={**payload, "election_id": self._election_id},
        )
        self._event_log.append(event)
        return event
