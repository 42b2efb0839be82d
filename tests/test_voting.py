"""
Tests for vote scoring and the voting engine.
"""

import pytest
from presidium.rules.committee import Vote, decide_outcome, describe_outcome, determine_vote
from presidium.state import (
    PLAYER_ID,
    AgendaCategory,
    AgendaItem,
    AgendaPriority,
    CharacterStatus,
    DecisionOutcome,
    EventType,
    RelationshipEdge,
    SCRank,
)
from presidium.systems import RelationshipSystem, VotingEngine

from conftest import FixedRNG


class HighRoll(FixedRNG):
    """Random source that draws the top of each integer range."""

    def randint(self, a: int, b: int) -> int:
        return b


def policy_item(**fields) -> AgendaItem:
    defaults = {
        "title": "Revise the Five-Year Plan",
        "category": AgendaCategory.POLICY,
        "priority": AgendaPriority.IMPORTANT,
    }
    defaults.update(fields)
    return AgendaItem(**defaults)


class TestDetermineVote:
    """Test determine_vote pure function."""

    @pytest.fixture
    def member(self, character_factory):
        return character_factory("m")

    def vote(self, member, item=None, chair_vote=None, sponsor=None, edge=None, rng=None):
        return determine_vote(member, item or policy_item(), chair_vote, sponsor, edge, rng or FixedRNG())

    def test_neutral_abstains(self, member):
        assert self.vote(member) == Vote.ABSTAIN

    def test_loyalty_follows_chair(self, member):
        assert self.vote(member, chair_vote=Vote.FOR) == Vote.FOR
        assert self.vote(member, chair_vote=Vote.AGAINST) == Vote.AGAINST

    def test_ambition_backs_personnel(self, member):
        # 50 + 50//4
        assert self.vote(member, item=policy_item(category=AgendaCategory.PERSONNEL)) == Vote.FOR

    def test_ruthlessness_backs_security(self, member):
        assert self.vote(member, item=policy_item(category=AgendaCategory.SECURITY)) == Vote.FOR

    def test_competent_member_skips_routine(self, character_factory):
        member = character_factory("m", competence=80)
        routine = policy_item(priority=AgendaPriority.ROUTINE)

        assert self.vote(member, item=routine, chair_vote=Vote.FOR, rng=FixedRNG(roll=0.0)) == Vote.ABSTAIN
        assert self.vote(member, item=routine, chair_vote=Vote.FOR, rng=FixedRNG(roll=1.0)) == Vote.FOR

    def test_paranoid_member_waits_without_chair_lead(self, character_factory):
        member = character_factory("m", paranoia=70)

        assert self.vote(member, chair_vote=None) == Vote.ABSTAIN
        assert self.vote(member, chair_vote=Vote.ABSTAIN) == Vote.ABSTAIN
        assert self.vote(member, chair_vote=Vote.FOR) == Vote.FOR

    def test_sponsor_faction_bonus(self, member, character_factory):
        sponsor = character_factory("s")
        assert self.vote(member, sponsor=sponsor) == Vote.FOR

    def test_sponsor_disposition_when_factions_differ(self, member, character_factory):
        sponsor = character_factory("s", faction_id="oldguard")
        warm = RelationshipEdge(source_id="m", target_id="s", disposition=60)
        cold = RelationshipEdge(source_id="m", target_id="s", disposition=-7)

        assert self.vote(member, sponsor=sponsor, edge=warm) == Vote.FOR
        # -7/4 truncates to -1
        assert self.vote(member, sponsor=sponsor, edge=cold) == Vote.ABSTAIN

    def test_empty_faction_is_not_shared(self, character_factory):
        member = character_factory("m", faction_id="")
        sponsor = character_factory("s", faction_id="")
        assert self.vote(member, sponsor=sponsor) == Vote.ABSTAIN

    def test_random_perturbation(self, member):
        assert self.vote(member, rng=HighRoll()) == Vote.FOR


class TestDecideOutcome:
    """Test the outcome table."""

    @pytest.mark.parametrize("tally,expected", [
        ((3, 1, 0), DecisionOutcome.APPROVED),
        ((3, 1, 1), DecisionOutcome.AMENDED_AND_APPROVED),
        ((2, 2, 1), DecisionOutcome.DEFERRED),
        ((0, 0, 0), DecisionOutcome.DEFERRED),
        ((1, 3, 0), DecisionOutcome.REJECTED),
        ((1, 3, 2), DecisionOutcome.REJECTED),
    ])
    def test_table(self, tally, expected):
        assert decide_outcome(*tally) == expected

    def test_descriptions_are_fixed_vocabulary(self):
        assert describe_outcome(DecisionOutcome.DEFERRED) == (
            "No consensus was reached. The matter will be revisited."
        )


class TestProcessItem:
    """Test full committee votes."""

    @pytest.fixture
    def engine(self, rng, bus):
        return VotingEngine(rng=rng, bus=bus)

    def test_loyal_majority_scenario(self, engine, five_member_committee, five_member_context):
        """Chair votes for; three loyalists follow, the two doubters hold back."""
        item = policy_item(sponsor_id="loyal1")

        decision = engine.process_item(item, five_member_committee, five_member_context)

        assert decision.outcome in (DecisionOutcome.APPROVED, DecisionOutcome.AMENDED_AND_APPROVED)
        assert decision.voting_record.votes_for >= 3
        assert decision.item.votes_for[0] == "chair"
        assert sorted(decision.item.abstentions) == ["doubter1", "doubter2"]
        assert decision.outcome == DecisionOutcome.AMENDED_AND_APPROVED

    def test_every_attendee_votes_once(self, engine, five_member_committee, five_member_context):
        decision = engine.process_item(policy_item(), five_member_committee, five_member_context)
        voted = decision.item.votes_for + decision.item.votes_against + decision.item.abstentions

        assert decision.voting_record.total_votes == 5
        assert sorted(voted) == sorted(five_member_committee.member_ids)

    def test_rejection_with_dissenters(self, engine, five_member_committee, five_member_context):
        relationships = RelationshipSystem(five_member_context.relationships)
        for member_id in ("chair", "loyal1", "loyal2"):
            relationships.record_betrayal(member_id, "doubter1", turn=1, severity=100)

        decision = engine.process_item(
            policy_item(sponsor_id="doubter1"), five_member_committee, five_member_context,
        )

        assert decision.outcome == DecisionOutcome.REJECTED
        assert decision.dissenter_ids == ["chair", "loyal1", "loyal2"]
        assert decision.summary == "The committee declined to approve the measure."
        assert not decision.voting_record.is_unanimous

    def test_paranoid_chair_abstains(self, engine, five_member_committee, five_member_context):
        five_member_context.character("chair").paranoia = 70
        five_member_context.character("doubter1").paranoia = 70

        decision = engine.process_item(
            policy_item(sponsor_id="loyal1"), five_member_committee, five_member_context,
        )

        assert "chair" in decision.item.abstentions
        assert "doubter1" in decision.item.abstentions

    def test_pending_item_untouched(self, engine, five_member_committee, five_member_context):
        item = policy_item()
        decision = engine.process_item(item, five_member_committee, five_member_context)

        assert not item.has_been_voted
        assert item.votes_for == []
        assert decision.item.has_been_voted
        assert decision.agenda_item_id == item.id

    def test_candidate_members_vote(self, engine, five_member_committee, five_member_context, character_factory):
        five_member_context.characters.append(character_factory("novice"))
        five_member_committee.add_candidate("novice", five_member_context.characters)

        decision = engine.process_item(policy_item(), five_member_committee, five_member_context)

        assert decision.voting_record.total_votes == 6

    def test_dead_members_do_not_attend(self, engine, five_member_committee, five_member_context):
        five_member_context.character("doubter2").status = CharacterStatus.DEAD

        decision = engine.process_item(policy_item(), five_member_committee, five_member_context)

        assert decision.voting_record.total_votes == 4

    def test_unknown_sponsor_is_ignored(self, engine, five_member_committee, five_member_context, caplog):
        with caplog.at_level("WARNING"):
            decision = engine.process_item(
                policy_item(sponsor_id="ghost"), five_member_committee, five_member_context,
            )

        assert "unknown sponsor" in caplog.text
        assert decision.voting_record.total_votes == 5

    def test_player_chair_gives_no_lead(self, engine, five_member_committee, five_member_context):
        five_member_committee.add_player(SCRank.CHAIRMAN)
        assert five_member_committee.chair_id == PLAYER_ID

        decision = engine.process_item(policy_item(), five_member_committee, five_member_context)

        # No lead and no sponsor: everyone sits at the neutral 50
        assert decision.outcome == DecisionOutcome.DEFERRED
        assert len(decision.item.abstentions) == 5

    def test_emits_decision_event(self, engine, bus, five_member_committee, five_member_context):
        engine.process_item(policy_item(), five_member_committee, five_member_context)

        event = bus.get_history(EventType.DECISION_REACHED)[-1]
        assert event.data["votes_for"] + event.data["votes_against"] + event.data["abstentions"] == 5
