"""
Committee voting and meeting rules as pure functions.

Vote scoring, the outcome table, and the atmosphere table are fixed
game-balance policy. Randomness comes from an injected source.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from ..state.schema import (
    AgendaCategory,
    AgendaPriority,
    DecisionOutcome,
    MeetingAtmosphere,
    PRIORITY_RANK,
)
from .relationship import tdiv

if TYPE_CHECKING:
    from ..state.schema import (
        AgendaItem,
        Character,
        CommitteeMembership,
        RelationshipEdge,
    )
    from ..tools.rng import RandomSource


class Vote(str, Enum):
    FOR = "for"
    AGAINST = "against"
    ABSTAIN = "abstain"


VOTE_NEUTRAL = 50
VOTE_FOR_ABOVE = 60
VOTE_AGAINST_BELOW = 40
SPONSOR_FACTION_BONUS = 20

DECISION_SUMMARIES: dict[DecisionOutcome, str] = {
    DecisionOutcome.APPROVED: "The motion passed without significant opposition.",
    DecisionOutcome.REJECTED: "The committee declined to approve the measure.",
    DecisionOutcome.DEFERRED: "No consensus was reached. The matter will be revisited.",
    DecisionOutcome.AMENDED_AND_APPROVED: "After amendments, the measure was approved.",
    DecisionOutcome.REFERRED: "The committee referred the matter for further study.",
}


def determine_vote(
    member: "Character",
    item: "AgendaItem",
    chair_vote: Vote | None,
    sponsor: "Character | None",
    edge: "RelationshipEdge | None",
    rng: "RandomSource",
    vote_variance: int = 15,
    abstain_chance: float = 0.2,
) -> Vote:
    """
    Decide one member's vote on an agenda item.

    chair_vote is None when there is no chair input: the chair's own vote,
    or a chair who abstained. edge is member -> sponsor, if one exists.
    """
    score = VOTE_NEUTRAL

    # Loyal members follow the chair
    if chair_vote in (Vote.FOR, Vote.AGAINST):
        swing = member.loyalty // 2
        score += swing if chair_vote == Vote.FOR else -swing

    # Ambitious members support items that increase power
    if item.category == AgendaCategory.PERSONNEL:
        score += member.ambition // 4

    # Ruthless members support security measures
    if item.category == AgendaCategory.SECURITY:
        score += member.ruthlessness // 3

    # Competent members disengage from trivial matters
    if member.competence > 70 and item.priority == AgendaPriority.ROUTINE:
        if rng.random() < abstain_chance:
            return Vote.ABSTAIN

    # Paranoid members wait to see which way the wind blows
    if member.paranoia > 60 and chair_vote in (None, Vote.ABSTAIN):
        return Vote.ABSTAIN

    # Faction alignment with the sponsor, else personal disposition toward them
    if sponsor is not None:
        if sponsor.faction_id and sponsor.faction_id == member.faction_id:
            score += SPONSOR_FACTION_BONUS
        elif edge is not None:
            score += tdiv(edge.disposition, 4)

    if vote_variance:
        score += rng.randint(-vote_variance, vote_variance)

    if score > VOTE_FOR_ABOVE:
        return Vote.FOR
    if score < VOTE_AGAINST_BELOW:
        return Vote.AGAINST
    return Vote.ABSTAIN


def decide_outcome(votes_for: int, votes_against: int, abstentions: int) -> DecisionOutcome:
    """Outcome table for a tallied vote."""
    if votes_for > votes_against:
        if abstentions == 0:
            return DecisionOutcome.APPROVED
        return DecisionOutcome.AMENDED_AND_APPROVED
    if votes_for == votes_against:
        return DecisionOutcome.DEFERRED
    return DecisionOutcome.REJECTED


def describe_outcome(outcome: DecisionOutcome) -> str:
    return DECISION_SUMMARIES[outcome]


def order_agenda(items: list["AgendaItem"]) -> list["AgendaItem"]:
    """Highest priority first; submission order kept within a priority."""
    return sorted(items, key=lambda item: PRIORITY_RANK[item.priority], reverse=True)


def determine_atmosphere(committee: "CommitteeMembership", stability: int) -> MeetingAtmosphere:
    """
    Meeting mood from national stability and faction spread on the committee.

    confrontational: stability < 30, or no faction holds a strict majority
    tense:           stability < 50, or more than 2 factions seated
    harmonious:      stability > 70 with at most 2 factions
    performative:    otherwise
    """
    seated = {f: n for f, n in committee.faction_balance.items() if n > 0}
    faction_count = len(seated)
    largest = max(seated.values(), default=0)
    has_majority = largest * 2 > committee.seat_count

    if stability < 30 or not has_majority:
        return MeetingAtmosphere.CONFRONTATIONAL
    if stability < 50 or faction_count > 2:
        return MeetingAtmosphere.TENSE
    if stability > 70 and faction_count <= 2:
        return MeetingAtmosphere.HARMONIOUS
    return MeetingAtmosphere.PERFORMATIVE
