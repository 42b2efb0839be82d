"""State management for the Standing Committee simulation."""

from .schema import (
    COMMITTEE_SEATS,
    PLAYER_ID,
    AgendaCategory,
    AgendaItem,
    AgendaPriority,
    AllianceBreakReason,
    Character,
    CharacterStatus,
    CommitteeMembership,
    Decision,
    DecisionOutcome,
    Faction,
    GameContext,
    MeetingAtmosphere,
    MeetingRecord,
    RelationshipEdge,
    RelationshipGraph,
    RelationshipStance,
    SCRank,
    SimulationSave,
    VotingRecord,
)
from .store import CommitteeStore, JsonCommitteeStore, MemoryCommitteeStore
from .event_bus import EventBus, EventType, CommitteeEvent

__all__ = [
    # Schema
    "COMMITTEE_SEATS",
    "PLAYER_ID",
    "AgendaCategory",
    "AgendaItem",
    "AgendaPriority",
    "AllianceBreakReason",
    "Character",
    "CharacterStatus",
    "CommitteeMembership",
    "Decision",
    "DecisionOutcome",
    "Faction",
    "GameContext",
    "MeetingAtmosphere",
    "MeetingRecord",
    "RelationshipEdge",
    "RelationshipGraph",
    "RelationshipStance",
    "SCRank",
    "SimulationSave",
    "VotingRecord",
    # Store
    "CommitteeStore",
    "JsonCommitteeStore",
    "MemoryCommitteeStore",
    # Events
    "EventBus",
    "EventType",
    "CommitteeEvent",
]
