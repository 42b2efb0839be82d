"""
Agenda voting engine.

Turns one agenda item into a Decision: the chair votes first, every other
attending member then votes with the chair's vote as an input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import BalanceConfig, resolve_config
from ..rules.committee import Vote, decide_outcome, describe_outcome, determine_vote
from ..state.event_bus import EventType
from ..state.schema import PLAYER_ID, Decision, DecisionOutcome, VotingRecord
from ..tools.rng import make_rng

if TYPE_CHECKING:
    from ..state.event_bus import EventBus
    from ..state.schema import AgendaItem, Character, CommitteeMembership, GameContext
    from ..tools.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class ItemResult:
    """One agenda item as it came out of a meeting."""
    item: "AgendaItem"  # With vote sets filled in
    outcome: DecisionOutcome
    description: str

    @classmethod
    def from_decision(cls, decision: Decision) -> "ItemResult":
        return cls(item=decision.item, outcome=decision.outcome, description=decision.summary)


class VotingEngine:
    """Simulates committee votes. Stateless apart from its random source."""

    def __init__(
        self,
        config: BalanceConfig | dict | None = None,
        rng: "RandomSource | None" = None,
        bus: "EventBus | None" = None,
    ):
        self.config = resolve_config(config)
        self._rng = make_rng(rng)
        self._bus = bus

    def attendees(self, committee: "CommitteeMembership", context: "GameContext") -> list["Character"]:
        """Seated members present for a vote: known to the registry and alive."""
        return [c for c in context.members(committee) if c.is_alive]

    def cast_vote(
        self,
        member: "Character",
        item: "AgendaItem",
        chair_vote: Vote | None,
        sponsor: "Character | None",
        context: "GameContext",
    ) -> Vote:
        edge = context.relationships.get(member.id, sponsor.id) if sponsor else None
        return determine_vote(
            member,
            item,
            chair_vote,
            sponsor,
            edge,
            self._rng,
            vote_variance=self.config["vote_variance"],
            abstain_chance=self.config["competence_abstain_chance"],
        )

    def process_item(
        self,
        item: "AgendaItem",
        committee: "CommitteeMembership",
        context: "GameContext",
    ) -> Decision:
        """
        Vote on one item and record the decision.

        The pending item is not modified; the voted copy lives in the
        returned Decision. An unknown sponsor counts as no sponsor.
        """
        sponsor = context.character(item.sponsor_id)
        if item.sponsor_id and sponsor is None and item.sponsor_id != PLAYER_ID:
            logger.warning(f"Agenda item {item.id} has unknown sponsor {item.sponsor_id}")

        attendees = self.attendees(committee, context)
        chair = next((m for m in attendees if m.id == committee.chair_id), None)

        votes: dict[Vote, list[str]] = {Vote.FOR: [], Vote.AGAINST: [], Vote.ABSTAIN: []}

        # The chair votes first, with no lead to follow
        chair_vote: Vote | None = None
        if chair is not None:
            chair_vote = self.cast_vote(chair, item, None, sponsor, context)
            votes[chair_vote].append(chair.id)
            logger.debug(f"Chair {chair.id} voted {chair_vote.value} on {item.id}")

        for member in attendees:
            if chair is not None and member.id == chair.id:
                continue
            vote = self.cast_vote(member, item, chair_vote, sponsor, context)
            votes[vote].append(member.id)
            logger.debug(f"{member.id} voted {vote.value} on {item.id}")

        voted = item.with_votes(votes[Vote.FOR], votes[Vote.AGAINST], votes[Vote.ABSTAIN])
        outcome = decide_outcome(
            len(voted.votes_for), len(voted.votes_against), len(voted.abstentions)
        )

        decision = Decision(
            agenda_item_id=item.id,
            item=voted,
            outcome=outcome,
            voting_record=VotingRecord(
                votes_for=len(voted.votes_for),
                votes_against=len(voted.votes_against),
                abstentions=len(voted.abstentions),
                is_unanimous=voted.was_unanimous,
            ),
            dissenter_ids=list(voted.votes_against),
            summary=describe_outcome(outcome),
        )

        if self._bus is not None:
            self._bus.emit(
                EventType.DECISION_REACHED,
                turn=context.turn,
                item_id=item.id,
                title=item.title,
                outcome=outcome.value,
                votes_for=decision.voting_record.votes_for,
                votes_against=decision.voting_record.votes_against,
                abstentions=decision.voting_record.abstentions,
            )
        return decision
