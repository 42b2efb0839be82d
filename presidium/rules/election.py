"""
Committee eligibility and election scoring as pure functions.

Eligibility never raises: rejection is an explicit result carrying every
unmet criterion so callers can explain it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..state.schema import CharacterStatus

if TYPE_CHECKING:
    from ..state.schema import Character, GameContext
    from ..tools.rng import RandomSource


MIN_POSITION_INDEX = 5   # Senior Politburo
MIN_SENIOR_TURNS = 12    # Turns at position 4+ (3 years)
MIN_COMPETENCE = 50
MIN_LOYALTY = 40
SENIOR_POSITION_INDEX = 4

BLOCKING_STATUSES = (CharacterStatus.UNDER_INVESTIGATION, CharacterStatus.DETAINED)

ELIGIBLE_REASON = "Meets all eligibility criteria"


@dataclass
class EligibilityResult:
    """Whether a character may sit on the committee, and why."""
    eligible: bool
    reasons: list[str] = field(default_factory=list)


def is_eligible(character: "Character", context: "GameContext | None" = None) -> EligibilityResult:
    """
    Check a character against every committee criterion.

    All failing criteria are reported, not just the first. A character who
    passes gets a single affirmative reason.
    """
    reasons: list[str] = []

    if not character.is_alive:
        reasons.append("Not active: character is no longer living")

    position = character.position_index or 0
    if position < MIN_POSITION_INDEX:
        reasons.append(
            f"Position must be Senior Politburo ({MIN_POSITION_INDEX}+), currently {position}"
        )

    if character.turns_at_senior_position < MIN_SENIOR_TURNS:
        reasons.append(
            f"Need {MIN_SENIOR_TURNS}+ turns at senior level, "
            f"have {character.turns_at_senior_position}"
        )

    if character.status in BLOCKING_STATUSES:
        reasons.append("Under active investigation or detention")

    if character.competence < MIN_COMPETENCE:
        reasons.append(f"Competence must be {MIN_COMPETENCE}+, currently {character.competence}")

    if character.loyalty < MIN_LOYALTY:
        reasons.append(f"Loyalty must be {MIN_LOYALTY}+, currently {character.loyalty}")

    if not character.faction_id:
        reasons.append("Must be aligned with a major faction")

    if reasons:
        return EligibilityResult(eligible=False, reasons=reasons)
    return EligibilityResult(eligible=True, reasons=[ELIGIBLE_REASON])


def election_score(
    candidate: "Character",
    faction_power: int,
    chair_faction_id: str | None,
    has_chair: bool,
    rng: "RandomSource",
    variance: float = 5.0,
) -> float:
    """
    Party Congress score for one candidate. Floored at 0.

    faction power x 0.4, chair endorsement (+30 same faction, +10 otherwise,
    0 with no chair), competence/100 x 15 + loyalty/100 x 5,
    min(position x 1.5, 10), plus a uniform draw in [-variance, variance].
    """
    score = faction_power * 0.4

    if has_chair:
        if chair_faction_id is not None and candidate.faction_id == chair_faction_id:
            score += 30.0  # Full endorsement
        else:
            score += 10.0

    score += candidate.competence / 100.0 * 15.0
    score += candidate.loyalty / 100.0 * 5.0

    score += min((candidate.position_index or 0) * 1.5, 10.0)

    if variance:
        score += rng.uniform(-variance, variance)

    return max(0.0, score)


def selection_power(character: "Character") -> int:
    """Raw political weight used to seat the very first committee."""
    power = (character.position_index or 0) * 10
    power += character.loyalty // 2
    power += min(character.turns_at_senior_position, 20) * 2
    power += character.competence // 5
    return power
