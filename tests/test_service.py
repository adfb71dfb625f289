"""Tests for BallotService — proves the facade returns typed results and audits every call."""

import threading

import pytest

from ballot.config import BallotConfig
from ballot.ledger.errors import BallotErrorKind
from ballot.persistence.event_log import EventKind, EventLog
from ballot.service import BallotService

CHAIR = "0xchair"


@pytest.fixture
def service() -> BallotService:
    return BallotService(CHAIR, ["Proposal 1", "Proposal 2", "Proposal 3"])


class TestConstruction:
    def test_creation_is_audited(self, service: BallotService) -> None:
        events = service.event_log.events()
        assert len(events) == 1
        assert events[0].event_kind == EventKind.ELECTION_CREATED
        assert events[0].event_id == "EVT-00000001"
        assert events[0].payload["proposals"] == ["Proposal 1", "Proposal 2", "Proposal 3"]

    def test_from_config(self) -> None:
        config = BallotConfig(chairperson="0xboss", proposals=("Yes", "No"))
        service = BallotService.from_config(config)
        assert service.ledger.chairperson == "0xboss"
        assert service.winner_name() == "Yes"

    def test_shared_event_log_continues_ids(self) -> None:
        log = EventLog()
        BallotService(CHAIR, ["A"], event_log=log)
        BallotService(CHAIR, ["B"], event_log=log)
        assert [e.event_id for e in log.events()] == ["EVT-00000001", "EVT-00000002"]

    def test_events_carry_election_id(self, service: BallotService) -> None:
        service.give_right_to_vote(CHAIR, "0xalice")
        service.give_right_to_vote("0xalice", "0xbob")  # rejected
        ids = {e.payload["election_id"] for e in service.event_log.events()}
        assert ids == {service.election_id}


class TestSharedEventLog:
    def test_interleaved_calls_get_unique_ids(self) -> None:
        log = EventLog()
        first = BallotService(CHAIR, ["A"], event_log=log)
        second = BallotService(CHAIR, ["B"], event_log=log)
        assert first.give_right_to_vote(CHAIR, "0xa").success
        assert second.give_right_to_vote(CHAIR, "0xa").success
        assert first.vote("0xa", 0).success
        assert second.vote(CHAIR, 0).success
        ids = [e.event_id for e in log.events()]
        assert len(set(ids)) == len(ids) == 6
        assert first.election_id != second.election_id

    def test_invariants_ignore_other_elections(self) -> None:
        log = EventLog()
        first = BallotService(CHAIR, ["A", "B"], event_log=log)
        second = BallotService(CHAIR, ["A", "B"], event_log=log)
        first.give_right_to_vote(CHAIR, "0xa")
        first.vote("0xa", 1)
        first.vote(CHAIR, 0)
        assert second.check_invariants() == []
        assert first.check_invariants() == []
        second.vote(CHAIR, 1)
        assert second.check_invariants() == []
        assert first.check_invariants() == []

    def test_status_counts_own_events(self) -> None:
        log = EventLog()
        first = BallotService(CHAIR, ["A"], event_log=log)
        first.give_right_to_vote(CHAIR, "0xa")
        first.vote("0xa", 0)
        second = BallotService(CHAIR, ["A"], event_log=log)
        assert first.status()["events"] == 3
        assert second.status()["events"] == 1
        assert log.count == 4


class TestOperations:
    def test_give_right_success(self, service: BallotService) -> None:
        result = service.give_right_to_vote(CHAIR, "0xalice")
        assert result.success
        assert result.data["voter"] == "0xalice"
        assert service.get_voter("0xalice")["weight"] == 1
        assert service.event_log.last_event.event_kind == EventKind.RIGHT_GRANTED

    def test_unauthorized_is_typed_failure(self, service: BallotService) -> None:
        result = service.give_right_to_vote("0xattacker", "0xalice")
        assert not result.success
        assert result.errors == ["Only chairperson can give right to vote."]
        assert result.data["error"] == BallotErrorKind.UNAUTHORIZED.value
        last = service.event_log.last_event
        assert last.event_kind == EventKind.CALL_REJECTED
        assert last.payload["operation"] == "give_right_to_vote"

    def test_vote_reports_weight(self, service: BallotService) -> None:
        service.give_right_to_vote(CHAIR, "0xalice")
        service.delegate("0xalice", CHAIR)
        result = service.vote(CHAIR, 2)
        assert result.success
        assert result.data["weight"] == 2
        assert result.data["credited_weight"] == 2
        assert service.winning_proposal() == 2
        assert service.winner_name() == "Proposal 3"

    def test_delegate_to_undecided_voter(self, service: BallotService) -> None:
        service.give_right_to_vote(CHAIR, "0xalice")
        result = service.delegate(CHAIR, "0xalice")
        assert result.success
        assert result.data["resolved_to"] == "0xalice"
        assert result.data["credited_weight"] == 0
        assert "proposal" not in result.data

    def test_delegate_to_voted_voter_credits(self, service: BallotService) -> None:
        service.give_right_to_vote(CHAIR, "0xa")
        service.give_right_to_vote(CHAIR, "0xb")
        service.vote("0xb", 1)
        service.delegate("0xa", "0xb")
        result = service.delegate(CHAIR, "0xa")
        assert result.success
        assert result.data["delegate_to"] == "0xa"
        assert result.data["resolved_to"] == "0xb"
        assert result.data["credited_weight"] == 1
        assert result.data["proposal"] == 1
        assert service.status()["total_votes"] == 3

    def test_cycle_is_typed_failure(self, service: BallotService) -> None:
        service.give_right_to_vote(CHAIR, "0xa")
        service.delegate(CHAIR, "0xa")
        result = service.delegate("0xa", CHAIR)
        assert not result.success
        assert result.data["error"] == BallotErrorKind.DELEGATION_CYCLE.value

    def test_invalid_proposal_is_typed_failure(self, service: BallotService) -> None:
        result = service.vote(CHAIR, 7)
        assert not result.success
        assert result.data["error"] == BallotErrorKind.INVALID_PROPOSAL.value
        assert service.get_voter(CHAIR)["voted"] is False


class TestStatus:
    def test_fresh_status(self, service: BallotService) -> None:
        status = service.status()
        assert status["chairperson"] == CHAIR
        assert status["total_votes"] == 0
        assert status["winning_proposal"] == 0
        assert status["winner_name"] == "Proposal 1"
        assert status["events"] == 1
        assert [p["name"] for p in status["proposals"]] == [
            "Proposal 1", "Proposal 2", "Proposal 3",
        ]

    def test_invariants_hold_after_mixed_calls(self, service: BallotService) -> None:
        for voter in ("0xa", "0xb", "0xc"):
            service.give_right_to_vote(CHAIR, voter)
        service.vote("0xc", 0)
        service.delegate("0xb", "0xc")
        service.delegate("0xa", "0xb")
        service.delegate("0xc", "0xa")  # rejected: already voted
        service.vote("0xnobody", 1)  # rejected: no rights
        assert service.check_invariants() == []
        assert service.status()["total_votes"] == 3

    def test_status_consistent_under_concurrent_votes(self) -> None:
        service = BallotService(CHAIR, ["A", "B"])
        voters = [f"0x{i:04x}" for i in range(200)]
        for voter in voters:
            service.give_right_to_vote(CHAIR, voter)
        baseline = 1 + len(voters)
        observed: list[tuple[int, int]] = []
        done = threading.Event()

        def read() -> None:
            while not done.is_set():
                status = service.status()
                observed.append((status["events"], status["total_votes"]))

        reader = threading.Thread(target=read)
        reader.start()
        for i, voter in enumerate(voters):
            service.vote(voter, i % 2)
        done.set()
        reader.join()
        # One VOTE_CAST event per unit of tallied weight.
        assert all(events == baseline + votes for events, votes in observed)
