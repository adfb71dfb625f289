"""Election ledger — the voting and delegation state machine.

One chairperson, one fixed proposal list, one voter registry. The
chairperson grants rights; rights-holders either vote or hand their
weight to another voter. Delegation is transitive: weight always lands on
the end of the chain, never on an intermediate delegator.

Every mutating call validates first and writes second, so a rejected
call leaves the ledger exactly as it was. All public methods run under
one re-entrant lock around the whole entity.

The ledger is a pure state machine — no side effects. Audit events are
recorded by the service layer.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional, Sequence

from ballot.ledger.errors import (
    AlreadyHasRightsError,
    AlreadyVotedError,
    DelegationCycleError,
    InvalidProposalError,
    NoRightToVoteError,
    SelfDelegationError,
    UnauthorizedError,
)
from ballot.models.election import (
    DelegationOutcome,
    LedgerSnapshot,
    Proposal,
    Voter,
    VoterStatus,
    leading_proposal,
)
from ballot.models.identifiers import ProposalName, to_bytes32


class ElectionLedger:
    """Single-election voting ledger with transitive delegation.

    Usage:
        ledger = ElectionLedger("0xchair", ["Proposal 1", "Proposal 2"])
        ledger.give_right_to_vote("0xchair", "0xalice")
        ledger.delegate("0xalice", "0xchair")
        ledger.vote("0xchair", 1)
        ledger.winning_proposal()  # 1
    """

    def __init__(
        self,
        chairperson: str,
        proposal_names: Sequence[ProposalName],
    ) -> None:
        if not proposal_names:
            raise ValueError("At least one proposal is required")
        self._lock = threading.RLock()
        self._chairperson = chairperson
        self._proposals: list[Proposal] = [
            Proposal(name=to_bytes32(name)) for name in proposal_names
        ]
        self._voters: dict[str, Voter] = {chairperson: Voter(weight=1)}
        self._voter_count = 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def give_right_to_vote(self, caller: str, voter: str) -> None:
        """Grant weight 1 to a voter. Chairperson only.

        Transitions: NO_RIGHTS → CAN_VOTE
        """
        with self._lock:
            if caller != self._chairperson:
                raise UnauthorizedError()
            record = self._voters.get(voter, Voter())
            if record.voted:
                raise AlreadyVotedError("The voter already voted.")
            if record.weight != 0:
                raise AlreadyHasRightsError()

            record.weight = 1
            self._voters[voter] = record
            self._voter_count += 1

    def delegate(self, caller: str, to: str) -> DelegationOutcome:
        """Delegate the caller's weight to ``to``.

        The immediate target is stored on the caller; the weight moves to
        the end of the delegation chain. If that voter already voted, the
        weight is credited to their proposal straight away.

        Transitions: CAN_VOTE → VOTED
        """
        with self._lock:
            sender = self._voters.get(caller, Voter())
            if sender.weight == 0:
                raise NoRightToVoteError("You have no right to vote")
            if sender.voted:
                raise AlreadyVotedError("You already voted.")
            if to == caller:
                raise SelfDelegationError()

            final = self._resolve_delegation(caller, to)

            sender.voted = True
            sender.delegate_to = to
            target = self._voters.setdefault(final, Voter())
            if target.voted:
                self._proposals[target.vote].vote_count += sender.weight
                credited: Optional[int] = target.vote
            else:
                target.weight += sender.weight
                credited = None
            return DelegationOutcome(
                delegate_to=to,
                resolved_to=final,
                weight=sender.weight,
                credited_proposal=credited,
            )

    def vote(self, caller: str, proposal: int) -> int:
        """Cast the caller's full weight (own plus delegated) for a proposal.

        Transitions: CAN_VOTE → VOTED

        Returns:
            The weight added to the proposal's tally.
        """
        with self._lock:
            sender = self._voters.get(caller, Voter())
            if sender.weight == 0:
                raise NoRightToVoteError()
            if sender.voted:
                raise AlreadyVotedError()
            if not self._valid_index(proposal):
                raise InvalidProposalError(
                    f"Invalid proposal index: {proposal!r} "
                    f"(have {len(self._proposals)} proposals)"
                )

            sender.voted = True
            sender.vote = proposal
            self._proposals[proposal].vote_count += sender.weight
            return sender.weight

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def winning_proposal(self) -> int:
        """Index of the leading proposal; first index wins ties, 0 if no votes."""
        with self._lock:
            return leading_proposal(self._proposals)

    def winner_name(self) -> bytes:
        """bytes32 name of the winning proposal."""
        with self._lock:
            return self._proposals[self.winning_proposal()].name

    @property
    def chairperson(self) -> str:
        return self._chairperson

    @property
    def proposal_count(self) -> int:
        return len(self._proposals)

    @property
    def voter_count(self) -> int:
        """Number of voters granted rights by the chairperson."""
        with self._lock:
            return self._voter_count

    def proposal(self, index: int) -> Proposal:
        with self._lock:
            if not self._valid_index(index):
                raise InvalidProposalError(f"Invalid proposal index: {index!r}")
            return replace(self._proposals[index])

    def proposals(self) -> list[Proposal]:
        with self._lock:
            return [replace(p) for p in self._proposals]

    def voter(self, address: str) -> Voter:
        """Return a copy of a voter's record.

        Unknown addresses read as a zero-weight default and are not
        added to the registry.
        """
        with self._lock:
            return replace(self._voters.get(address, Voter()))

    def status_of(self, address: str) -> VoterStatus:
        return self.voter(address).status

    def delegated(self, address: str) -> bool:
        return self.voter(address).delegated

    def directly_voted(self, address: str) -> bool:
        return self.voter(address).directly_voted

    def snapshot(self) -> LedgerSnapshot:
        """Read-consistent copy of the entire ledger."""
        with self._lock:
            return LedgerSnapshot(
                chairperson=self._chairperson,
                proposals=tuple(replace(p) for p in self._proposals),
                voters={addr: replace(v) for addr, v in self._voters.items()},
                voter_count=self._voter_count,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _valid_index(self, index: object) -> bool:
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        return 0 <= index < len(self._proposals)

    def _resolve_delegation(self, caller: str, to: str) -> str:
        """Follow delegate_to pointers from ``to`` to the end of the chain.

        Raises DelegationCycleError if the chain leads back to the caller.
        The visited set caps the walk at the registry size.
        """
        current = to
        visited: set[str] = set()
        while True:
            record: Optional[Voter] = self._voters.get(current)
            if record is None or record.delegate_to is None:
                return current
            if current in visited or len(visited) >= len(self._voters):
                raise DelegationCycleError()
            visited.add(current)
            current = record.delegate_to
            if current == caller:
                raise DelegationCycleError()
