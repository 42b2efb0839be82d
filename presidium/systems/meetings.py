"""
Meeting orchestrator for Standing Committee sessions.

Sequences one full session: atmosphere, agenda in priority order, a
Decision per item, then the minutes. A session always runs to completion
once started.

Also hosts the agenda intake (items and law-change proposals) and the
chair's assessment of committee loyalty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config import BalanceConfig, resolve_config
from ..rules.committee import determine_atmosphere, order_agenda
from ..rules.narrative import narrate_meeting
from ..rules.relationship import clamp, tdiv
from ..state.event_bus import EventType
from ..state.schema import (
    AgendaCategory,
    AgendaItem,
    AgendaPriority,
    MeetingRecord,
    PLAYER_ID,
)
from .voting import ItemResult, VotingEngine

if TYPE_CHECKING:
    from ..state.event_bus import EventBus
    from ..state.schema import CommitteeMembership, GameContext
    from ..tools.rng import RandomSource

logger = logging.getLogger(__name__)


LOYAL_THRESHOLD = 70
HOSTILE_BELOW = 40


@dataclass
class MeetingResult:
    """Structured outcome of a session. meeting is None if none was held."""
    meeting: MeetingRecord | None = None
    item_results: list[ItemResult] = field(default_factory=list)
    narrative: str = ""

    @property
    def held(self) -> bool:
        return self.meeting is not None


@dataclass
class LoyaltyAssessment:
    """How the committee's members stand toward a chair."""
    scores: dict[str, int] = field(default_factory=dict)
    loyal: list[str] = field(default_factory=list)
    uncommitted: list[str] = field(default_factory=list)
    hostile: list[str] = field(default_factory=list)
    overall: int = 50


class MeetingOrchestrator:
    """
    Convenes committee sessions.

    Holds no committee state of its own: the committee and game context are
    passed to every call.
    """

    def __init__(
        self,
        config: BalanceConfig | dict | None = None,
        rng: "RandomSource | None" = None,
        bus: "EventBus | None" = None,
        voting: VotingEngine | None = None,
    ):
        self.config = resolve_config(config)
        self._bus = bus
        self.voting = voting or VotingEngine(self.config, rng=rng, bus=bus)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def convene_meeting(
        self,
        committee: "CommitteeMembership | None",
        context: "GameContext",
    ) -> MeetingResult:
        """
        Hold a session and record it in the committee's minutes.

        Clears the pending agenda, appends the MeetingRecord and updates
        last_meeting_turn. Without a committee nothing happens.
        """
        if committee is None:
            logger.warning("Meeting requested with no Standing Committee")
            result = MeetingResult()
            result.narrative = narrate_meeting(result)
            return result

        atmosphere = determine_atmosphere(committee, context.stability)
        attendees = [m.id for m in self.voting.attendees(committee, context)]
        agenda = order_agenda(committee.pending_agenda)

        decisions = [self.voting.process_item(item, committee, context) for item in agenda]

        meeting = MeetingRecord(
            turn_held=context.turn,
            attendee_ids=attendees,
            items_discussed=[item.id for item in agenda],
            decisions=decisions,
            atmosphere=atmosphere,
        )

        committee.pending_agenda = []
        committee.meeting_history.append(meeting)
        committee.last_meeting_turn = context.turn

        result = MeetingResult(
            meeting=meeting,
            item_results=[ItemResult.from_decision(d) for d in decisions],
        )
        names = {c.id: c.display_name for c in context.characters}
        result.narrative = narrate_meeting(result, names)

        logger.info(
            f"Committee convened at turn {context.turn} ({atmosphere.value}): "
            f"{len(attendees)} attending, {len(decisions)} items decided"
        )
        if self._bus is not None:
            self._bus.emit(
                EventType.MEETING_CONVENED,
                turn=context.turn,
                meeting_id=meeting.id,
                atmosphere=atmosphere.value,
                items=len(decisions),
            )
        return result

    # -------------------------------------------------------------------------
    # Agenda intake
    # -------------------------------------------------------------------------

    def submit_agenda_item(
        self,
        committee: "CommitteeMembership",
        title: str,
        description: str,
        category: AgendaCategory,
        priority: AgendaPriority = AgendaPriority.ROUTINE,
        sponsor_id: str | None = None,
        turn: int = 0,
    ) -> AgendaItem:
        """Add an item to the pending agenda."""
        item = AgendaItem(
            title=title,
            description=description,
            category=category,
            priority=priority,
            sponsor_id=sponsor_id,
            turn_submitted=turn,
        )
        committee.pending_agenda.append(item)

        logger.debug(f"Agenda item submitted: {title} ({priority.value})")
        if self._bus is not None:
            self._bus.emit(
                EventType.AGENDA_SUBMITTED,
                turn=turn,
                item_id=item.id,
                title=title,
                category=category.value,
                priority=priority.value,
                sponsor=sponsor_id,
            )
        return item

    def propose_law_change(
        self,
        committee: "CommitteeMembership",
        law_name: str,
        current_state: str,
        new_state: str,
        institutional: bool,
        sponsor_id: str,
        turn: int = 0,
    ) -> AgendaItem | None:
        """
        Put a law change before the committee.

        Only members may propose. Institutional laws go on as critical.
        """
        on_committee = committee.is_member(sponsor_id) or (
            sponsor_id == PLAYER_ID and committee.player_on_committee
        )
        if not on_committee:
            logger.warning(f"Law change on {law_name} refused: {sponsor_id} is not on the committee")
            return None

        return self.submit_agenda_item(
            committee,
            title=f"Modify: {law_name}",
            description=f"Proposal to change {law_name} from '{current_state}' to '{new_state}'",
            category=AgendaCategory.POLICY,
            priority=AgendaPriority.CRITICAL if institutional else AgendaPriority.IMPORTANT,
            sponsor_id=sponsor_id,
            turn=turn,
        )

    # -------------------------------------------------------------------------
    # Loyalty
    # -------------------------------------------------------------------------

    def assess_loyalty(
        self,
        committee: "CommitteeMembership | None",
        context: "GameContext",
        chair_id: str | None = None,
    ) -> LoyaltyAssessment:
        """
        Score every member's loyalty toward a chair (default: the sitting one).

        Loyalty trait, +20 for sharing the chair's faction, then the
        member -> chair edge: disposition/4 + fear/5 - grudge/3.
        """
        assessment = LoyaltyAssessment()
        if committee is None:
            return assessment

        chair_id = chair_id or committee.chair_id
        chair = context.character(chair_id)

        for member in context.members(committee):
            if member.id == chair_id:
                continue

            score = member.loyalty
            if chair is not None and chair.faction_id and member.faction_id == chair.faction_id:
                score += 20

            edge = context.relationships.get(member.id, chair_id) if chair_id else None
            if edge is not None:
                score += tdiv(edge.disposition, 4)
                score += edge.fear // 5
                score -= edge.grudge_level // 3

            score = clamp(score, 0, 100)
            assessment.scores[member.id] = score
            if score >= LOYAL_THRESHOLD:
                assessment.loyal.append(member.id)
            elif score < HOSTILE_BELOW:
                assessment.hostile.append(member.id)
            else:
                assessment.uncommitted.append(member.id)

        if assessment.scores:
            assessment.overall = sum(assessment.scores.values()) // len(assessment.scores)
        return assessment
