"""Ledger invariant checks.

Runs against a read-consistent snapshot and returns a list of violation
messages. Empty list means every invariant holds.
"""

from __future__ import annotations

from typing import Optional

from ballot.ledger.election import ElectionLedger
from ballot.models.election import LedgerSnapshot
from ballot.persistence.event_log import EventKind, EventLog, EventRecord


def check_ledger(
    ledger: ElectionLedger,
    event_log: Optional[EventLog] = None,
    election_id: Optional[str] = None,
) -> list[str]:
    """Audit a ledger. Pass the service's event log to cross-check tallies.

    When the log is shared between elections, election_id limits the
    cross-check to this election's events.
    """
    snapshot = ledger.snapshot()
    errors: list[str] = []
    _check_chairperson(snapshot, errors)
    _check_weight_conservation(snapshot, errors)
    _check_votes(snapshot, errors)
    _check_delegation_chains(snapshot, errors)
    if event_log is not None:
        _check_against_event_log(snapshot, event_log, election_id, errors)
    return errors


def _check_chairperson(snapshot: LedgerSnapshot, errors: list[str]) -> None:
    chair = snapshot.voters.get(snapshot.chairperson)
    if chair is None:
        errors.append(f"chairperson {snapshot.chairperson} missing from registry")
    elif chair.weight < 1:
        errors.append(f"chairperson weight must be >= 1, got {chair.weight}")


def _check_weight_conservation(snapshot: LedgerSnapshot, errors: list[str]) -> None:
    """Each granted unit of weight is either tallied or still held, never both."""
    granted = snapshot.voter_count + 1
    pending = sum(v.weight for v in snapshot.voters.values() if not v.voted)
    if snapshot.total_votes + pending != granted:
        errors.append(
            f"weight not conserved: tallied ({snapshot.total_votes}) + "
            f"pending ({pending}) != granted ({granted})"
        )
    for address, voter in snapshot.voters.items():
        if voter.weight < 0:
            errors.append(f"{address}: negative weight {voter.weight}")


def _check_votes(snapshot: LedgerSnapshot, errors: list[str]) -> None:
    count = len(snapshot.proposals)
    for address, voter in snapshot.voters.items():
        if voter.directly_voted and not 0 <= voter.vote < count:
            errors.append(f"{address}: vote index {voter.vote} out of range")
        if voter.delegated and not voter.voted:
            errors.append(f"{address}: delegation recorded without a cast ballot")
    for index, proposal in enumerate(snapshot.proposals):
        if proposal.vote_count < 0:
            errors.append(f"proposal {index}: negative vote_count")


def _check_delegation_chains(snapshot: LedgerSnapshot, errors: list[str]) -> None:
    """No voter may reach itself by following delegate_to pointers."""
    for start, voter in snapshot.voters.items():
        if voter.delegate_to == start:
            errors.append(f"{start}: self-delegation")
            continue
        seen = {start}
        current = voter.delegate_to
        while current is not None:
            if current in seen:
                errors.append(f"{start}: delegation cycle through {current}")
                break
            seen.add(current)
            nxt = snapshot.voters.get(current)
            current = nxt.delegate_to if nxt is not None else None


def _check_against_event_log(
    snapshot: LedgerSnapshot,
    event_log: EventLog,
    election_id: Optional[str],
    errors: list[str],
) -> None:
    credited = sum(
        e.payload.get("credited_weight", 0)
        for e in election_events(event_log, election_id)
        if e.event_kind in (EventKind.VOTE_CAST, EventKind.VOTE_DELEGATED)
    )
    if credited != snapshot.total_votes:
        errors.append(
            f"tally ({snapshot.total_votes}) does not match credited weight "
            f"in audit log ({credited})"
        )
    if not event_log.verify():
        errors.append("audit log integrity check failed")


def election_events(
    event_log: EventLog,
    election_id: Optional[str] = None,
) -> list[EventRecord]:
    """Events belonging to one election; all events if election_id is None."""
    if election_id is None:
        return event_log.events()
    return [
        e for e in event_log.events()
        if e.payload.get("election_id") == election_id
    ]
