"""Election data models — proposals, voters and ledger snapshots.

One election, fixed proposal set. Voters are keyed by an opaque address
string supplied by the hosting environment; the ledger only compares
addresses for equality.

Voter lifecycle (one-way):
    NO_RIGHTS → CAN_VOTE   (chairperson grants rights, or weight is delegated in)
    CAN_VOTE → VOTED       (vote or delegate)
VOTED is terminal.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ballot.models.identifiers import parse_bytes32_string


class VoterStatus(str, enum.Enum):
    """Derived lifecycle state of a voter."""
    NO_RIGHTS = "no_rights"
    CAN_VOTE = "can_vote"
    VOTED = "voted"


@dataclass
class Proposal:
    """A ballot proposal.

    Invariants:
    - name is a 32-byte identifier, fixed at construction
    - vote_count never decreases
    """
    name: bytes
    vote_count: int = 0

    @property
    def label(self) -> str:
        """Human-readable name decoded from the bytes32 form."""
        return parse_bytes32_string(self.name)

    def to_dict(self) -> dict[str, object]:
        return {"name": self.label, "vote_count": self.vote_count}


@dataclass
class Voter:
    """A voter registry entry.

    weight accumulates through delegation; delegate_to records the
    immediate target the voter asked for, not the resolved one.
    vote is meaningful only for voters who voted directly.
    """
    weight: int = 0
    voted: bool = False
    vote: int = 0
    delegate_to: Optional[str] = None

    @property
    def status(self) -> VoterStatus:
        if self.voted:
            return VoterStatus.VOTED
        if self.weight == 0:
            return VoterStatus.NO_RIGHTS
        return VoterStatus.CAN_VOTE

    @property
    def delegated(self) -> bool:
        return self.delegate_to is not None

    @property
    def directly_voted(self) -> bool:
        return self.voted and self.delegate_to is None

    def to_dict(self) -> dict[str, object]:
        return {
            "weight": self.weight,
            "voted": self.voted,
            "vote": self.vote,
            "delegate_to": self.delegate_to,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DelegationOutcome:
    """What a successful delegation did.

    credited_proposal is set when the resolved target had already voted
    and the weight went straight into that proposal's tally.
    """
    delegate_to: str
    resolved_to: str
    weight: int
    credited_proposal: Optional[int] = None

    @property
    def credited_weight(self) -> int:
        return self.weight if self.credited_proposal is not None else 0


def leading_proposal(proposals: Sequence[Proposal]) -> int:
    """Index of the proposal with the most votes.

    Strict comparison, scanned left to right: the first index to reach
    the maximum wins, and index 0 wins when nothing has been cast.
    """
    winning_count = 0
    winning_index = 0
    for index, proposal in enumerate(proposals):
        if proposal.vote_count > winning_count:
            winning_count = proposal.vote_count
            winning_index = index
    return winning_index


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-consistent copy of the whole ledger at one point in time."""
    chairperson: str
    proposals: tuple[Proposal, ...]
    voters: dict[str, Voter] = field(default_factory=dict)
    voter_count: int = 0

    @property
    def total_votes(self) -> int:
        return sum(p.vote_count for p in self.proposals)

    @property
    def winning_proposal(self) -> int:
        return leading_proposal(self.proposals)
