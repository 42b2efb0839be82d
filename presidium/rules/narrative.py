"""
Narration for committee sessions and Party Congress elections.

Consumes structured results; never feeds back into them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..state.schema import DecisionOutcome, MeetingAtmosphere

if TYPE_CHECKING:
    from ..state.schema import Character
    from ..systems.meetings import MeetingResult


ATMOSPHERE_OPENINGS: dict[MeetingAtmosphere, str] = {
    MeetingAtmosphere.HARMONIOUS: (
        "The atmosphere was one of studied unity, the members moving through "
        "the agenda with practiced efficiency."
    ),
    MeetingAtmosphere.TENSE: (
        "Tension hung in the air as members took their seats. Glances were "
        "exchanged. Lines had been drawn."
    ),
    MeetingAtmosphere.CONFRONTATIONAL: (
        "From the first moment it was clear this would be no ordinary session. "
        "Voices were raised. Accusations flew."
    ),
    MeetingAtmosphere.PERFORMATIVE: (
        "The members went through the motions, rubber-stamping decisions "
        "already made in private conversations."
    ),
}


@dataclass
class MeetingHeadline:
    """How a session surfaces in the player's event feed."""
    title: str
    priority: str  # "elevated", "normal", "background"
    urgent: bool = False


MEETING_HEADLINES: dict[MeetingAtmosphere, MeetingHeadline] = {
    MeetingAtmosphere.CONFRONTATIONAL: MeetingHeadline("Stormy Committee Session", "elevated", urgent=True),
    MeetingAtmosphere.TENSE: MeetingHeadline("Committee Meets Amid Tension", "normal"),
    MeetingAtmosphere.HARMONIOUS: MeetingHeadline("Committee Session", "background"),
    MeetingAtmosphere.PERFORMATIVE: MeetingHeadline("Routine Committee Meeting", "background"),
}


def meeting_headline(atmosphere: MeetingAtmosphere) -> MeetingHeadline:
    return MEETING_HEADLINES[atmosphere]


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def narrate_meeting(result: "MeetingResult", names: dict[str, str] | None = None) -> str:
    """Prose summary of a convened session."""
    if result.meeting is None:
        return "No Standing Committee exists."

    names = names or {}
    narrative = "The Standing Committee convened in the Great Hall. "
    narrative += ATMOSPHERE_OPENINGS[result.meeting.atmosphere]

    outcomes = [r.outcome for r in result.item_results]
    approved = sum(
        1 for o in outcomes
        if o in (DecisionOutcome.APPROVED, DecisionOutcome.AMENDED_AND_APPROVED)
    )
    rejected = sum(1 for o in outcomes if o == DecisionOutcome.REJECTED)

    if outcomes:
        narrative += f"\n\n{approved} {_plural(approved, 'measure was', 'measures were')} approved."
        if rejected:
            narrative += (
                f" {rejected} {_plural(rejected, 'was', 'were')} rejected, "
                "a rare display of dissent."
            )

    dissenters: list[str] = []
    for item_result in result.item_results:
        for member_id in item_result.item.votes_against:
            name = names.get(member_id, member_id)
            if name not in dissenters:
                dissenters.append(name)
    if dissenters:
        narrative += (
            f"\n\n{', '.join(dissenters[:3])} voted against one or more measures. "
            "Such opposition will be noted."
        )

    return narrative


def narrate_election(
    added: list["Character"],
    removed: list["Character"],
    chair: "Character | None",
) -> str:
    """Prose summary of a Party Congress election."""
    narrative = "The Party Congress has concluded its deliberations on Standing Committee composition.\n\n"

    if not added and not removed:
        narrative += (
            "The existing committee was reconfirmed in its entirety, "
            "a vote of confidence in the current leadership."
        )
    else:
        if added:
            names = ", ".join(c.display_name for c in added)
            narrative += f"Newly elected to the Standing Committee: {names}.\n"
        if removed:
            names = ", ".join(c.display_name for c in removed)
            narrative += (
                f"\nDeparting the Standing Committee: {names}. "
                "Their contributions to the Party are acknowledged."
            )

    if chair is not None:
        narrative += f"\n\n{chair.display_name} chairs the Committee, guiding the inner circle's deliberations."

    return narrative
