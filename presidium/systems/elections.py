"""
Eligibility and Party Congress elections.

The election service decides who sits on the Standing Committee: the
periodic full reselection, filling single vacancies between congresses,
and seating the very first committee at game start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..config import BalanceConfig, resolve_config
from ..rules.election import (
    SENIOR_POSITION_INDEX,
    EligibilityResult,
    election_score,
    is_eligible,
    selection_power,
)
from ..rules.narrative import narrate_election
from ..state.event_bus import EventType
from ..state.schema import PLAYER_ID, CommitteeMembership
from ..tools.rng import make_rng

if TYPE_CHECKING:
    from ..state.event_bus import EventBus
    from ..state.schema import Character, GameContext
    from ..tools.rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class ElectionResult:
    """Outcome of a Party Congress."""
    committee: CommitteeMembership
    elected: list["Character"] = field(default_factory=list)
    added: list["Character"] = field(default_factory=list)  # Elected without a prior seat
    removed: list["Character"] = field(default_factory=list)
    chair_id: str | None = None
    narrative: str = ""


class ElectionService:
    """
    Runs eligibility checks and elections.

    Randomness comes from the injected source; pass a seeded one for
    reproducible elections.
    """

    def __init__(
        self,
        config: BalanceConfig | dict | None = None,
        rng: "RandomSource | None" = None,
        bus: "EventBus | None" = None,
    ):
        self.config = resolve_config(config)
        self._rng = make_rng(rng)
        self._bus = bus

    # -------------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------------

    def is_eligible(self, character: "Character", context: "GameContext | None" = None) -> EligibilityResult:
        return is_eligible(character, context)

    def eligible_candidates(self, context: "GameContext") -> list["Character"]:
        """Eligible characters, highest position first, then by ID."""
        eligible = [c for c in context.characters if is_eligible(c, context).eligible]
        return sorted(eligible, key=lambda c: (-(c.position_index or 0), c.id))

    # -------------------------------------------------------------------------
    # Party Congress
    # -------------------------------------------------------------------------

    def is_congress_turn(self, turn: int) -> bool:
        """Whether a Party Congress convenes this turn."""
        interval = self.config["election_interval"]
        return interval > 0 and turn > 0 and turn % interval == 0

    def run_election(
        self,
        committee: CommitteeMembership | None,
        context: "GameContext",
        turn: int | None = None,
    ) -> ElectionResult:
        """
        Reselect the whole committee.

        Only the roster, chair and faction balance change. With fewer eligible
        candidates than seats, the remaining seats stay vacant. The player's
        seat is not up for election.
        """
        if committee is None:
            committee = CommitteeMembership()
        turn = context.turn if turn is None else turn

        max_seats = self.config["max_seats"]
        full_seats = self.config["full_seats"]
        chair_index = self.config["chair_position_index"]

        # Outgoing chair's endorsement, only from a chair in the registry
        outgoing_chair = context.character(committee.chair_id)
        has_chair = outgoing_chair is not None
        chair_faction_id = outgoing_chair.faction_id if outgoing_chair else None

        candidates = self.eligible_candidates(context)
        scored: list[tuple[float, "Character"]] = []
        for candidate in candidates:
            faction = context.faction(candidate.faction_id)
            score = election_score(
                candidate,
                faction_power=faction.power if faction else 0,
                chair_faction_id=chair_faction_id,
                has_chair=has_chair,
                rng=self._rng,
                variance=self.config["election_variance"],
            )
            scored.append((score, candidate))

        # Ties: higher position, then ID
        scored.sort(key=lambda sc: (-sc[0], -(sc[1].position_index or 0), sc[1].id))
        elected = [c for _, c in scored[:max_seats]]
        full = elected[:full_seats]
        candidate_members = elected[full_seats:]

        # New chair: first elected at chair rank, else the top scorer
        chair = next(
            (c for c in elected if (c.position_index or 0) >= chair_index),
            elected[0] if elected else None,
        )
        if chair is not None and chair not in full:
            # The chair must hold a full seat; the lowest full member steps down
            candidate_members.remove(chair)
            if len(full) >= full_seats:
                candidate_members.insert(0, full.pop())
            full.append(chair)

        chair_id = chair.id if chair else None
        if committee.player_is_chair:
            chair_id = PLAYER_ID

        previous_ids = set(committee.member_ids)
        elected_ids = {c.id for c in elected}
        removed = [
            c for c in (context.character(mid) for mid in committee.member_ids)
            if c is not None and c.id not in elected_ids
        ]

        committee.set_roster(
            [c.id for c in full],
            [c.id for c in candidate_members],
            chair_id,
            context.characters,
        )

        added = [c for c in elected if c.id not in previous_ids]
        narrative = narrate_election(added, removed, context.character(chair_id))

        logger.info(
            f"Party Congress at turn {turn}: {len(elected)} elected "
            f"({len(added)} new, {len(removed)} departing), chair {chair_id}"
        )
        if self._bus is not None:
            self._bus.emit(
                EventType.ELECTION_HELD,
                turn=turn,
                elected=[c.id for c in elected],
                removed=[c.id for c in removed],
                chair=chair_id,
            )

        return ElectionResult(
            committee=committee,
            elected=elected,
            added=added,
            removed=removed,
            chair_id=chair_id,
            narrative=narrative,
        )

    # -------------------------------------------------------------------------
    # Between congresses
    # -------------------------------------------------------------------------

    def fill_vacancy(
        self,
        committee: CommitteeMembership | None,
        context: "GameContext",
    ) -> "Character | None":
        """
        Co-opt one eligible character into an open seat as a candidate member.

        Prefers the chair's faction. Returns None when there is no committee,
        no free seat, or nobody eligible.
        """
        if committee is None:
            logger.warning("Vacancy fill requested with no committee")
            return None
        if committee.vacancies(self.config["max_seats"]) <= 0:
            return None

        seated = set(committee.member_ids)
        available = [c for c in self.eligible_candidates(context) if c.id not in seated]
        if not available:
            logger.info("No eligible candidate to fill committee vacancy")
            return None

        chair = context.character(committee.chair_id)
        preferred = [
            c for c in available
            if chair is not None and chair.faction_id and c.faction_id == chair.faction_id
        ]
        appointee = (preferred or available)[0]

        if not committee.add_candidate(appointee.id, context.characters, self.config["max_seats"]):
            return None

        logger.info(f"{appointee.display_name} co-opted to fill a committee vacancy")
        if self._bus is not None:
            self._bus.emit(
                EventType.VACANCY_FILLED,
                turn=context.turn,
                character=appointee.id,
                faction=appointee.faction_id,
            )
        return appointee

    def initialize_committee(self, context: "GameContext") -> CommitteeMembership:
        """
        Seat the first committee from the most powerful office holders.

        No eligibility check applies at game start.
        """
        office_holders = [
            c for c in context.characters
            if c.is_alive and c.position_index is not None
        ]
        office_holders.sort(key=lambda c: (-selection_power(c), c.id))

        seated = office_holders[: self.config["max_seats"]]
        full = seated[: self.config["full_seats"]]
        candidates = seated[self.config["full_seats"]:]

        committee = CommitteeMembership()
        committee.set_roster(
            [c.id for c in full],
            [c.id for c in candidates],
            full[0].id if full else None,
            context.characters,
        )
        logger.info(
            f"Standing Committee formed: {len(full)} full, {len(candidates)} candidate members"
        )
        if self._bus is not None:
            self._bus.emit(
                EventType.COMMITTEE_INITIALIZED,
                turn=context.turn,
                members=committee.member_ids,
                chair=committee.chair_id,
            )
        return committee

    def update_senior_tenure(self, context: "GameContext") -> int:
        """
        Accrue one senior turn for every living senior office holder.

        Called at end of turn. Returns how many characters accrued.
        """
        accrued = 0
        for character in context.characters:
            if character.is_alive and (character.position_index or 0) >= SENIOR_POSITION_INDEX:
                character.turns_at_senior_position += 1
                accrued += 1
        return accrued
