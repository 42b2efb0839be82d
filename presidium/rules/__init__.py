"""
Committee rules as pure functions.

Separates logic from data models for easier testing.
"""

from .relationship import (
    overall_quality,
    would_help,
    would_oppose,
    would_betray,
    stance,
    ai_context,
    apply_betrayal,
    apply_benefit,
    apply_alliance,
    apply_alliance_break,
    apply_rivalry,
    apply_fear,
    apply_respect,
    apply_shared_enemy,
    apply_decay,
)
from .election import (
    EligibilityResult,
    is_eligible,
    election_score,
    selection_power,
)
from .committee import (
    Vote,
    determine_vote,
    decide_outcome,
    describe_outcome,
    order_agenda,
    determine_atmosphere,
)
from .narrative import (
    MeetingHeadline,
    meeting_headline,
    narrate_meeting,
    narrate_election,
)

__all__ = [
    # Relationships
    "overall_quality",
    "would_help",
    "would_oppose",
    "would_betray",
    "stance",
    "ai_context",
    "apply_betrayal",
    "apply_benefit",
    "apply_alliance",
    "apply_alliance_break",
    "apply_rivalry",
    "apply_fear",
    "apply_respect",
    "apply_shared_enemy",
    "apply_decay",
    # Elections
    "EligibilityResult",
    "is_eligible",
    "election_score",
    "selection_power",
    # Voting and meetings
    "Vote",
    "determine_vote",
    "decide_outcome",
    "describe_outcome",
    "order_agenda",
    "determine_atmosphere",
    # Narration
    "MeetingHeadline",
    "meeting_headline",
    "narrate_meeting",
    "narrate_election",
]
