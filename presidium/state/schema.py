"""
Pydantic models for Standing Committee state.

All persisted state is versioned for migration support.
Designed to serialize to JSON but structured like database tables.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Iterable
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

# Seat limit for full + candidate members
COMMITTEE_SEATS = 7

# External designation for the human player's own seat
PLAYER_ID = "player"


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class CharacterStatus(str, Enum):
    ACTIVE = "active"                            # Currently in position
    DEAD = "dead"                                # Deceased
    EXILED = "exiled"                            # Sent away from power center
    IMPRISONED = "imprisoned"                    # In detention/labor camp
    RETIRED = "retired"                          # Forced or voluntary retirement
    DISAPPEARED = "disappeared"                  # Fate unknown, can return
    UNDER_INVESTIGATION = "underInvestigation"   # Being investigated by security organs
    DETAINED = "detained"                        # Short-term holding
    REHABILITATED = "rehabilitated"              # Restored after previous fall
    EXECUTED = "executed"                        # Death by execution


class AgendaCategory(str, Enum):
    PERSONNEL = "personnel"      # Appointments, dismissals
    POLICY = "policy"            # Major policy decisions
    ECONOMIC = "economic"        # Economic planning
    FOREIGN = "foreign"          # Foreign policy
    SECURITY = "security"        # Security matters
    IDEOLOGICAL = "ideological"  # Ideological campaigns
    CRISIS = "crisis"            # Emergency matters
    SUCCESSION = "succession"    # Leadership succession


class AgendaPriority(str, Enum):
    ROUTINE = "routine"
    IMPORTANT = "important"
    URGENT = "urgent"
    CRITICAL = "critical"


# Processing order: higher rank is taken up first
PRIORITY_RANK: dict[AgendaPriority, int] = {
    AgendaPriority.ROUTINE: 1,
    AgendaPriority.IMPORTANT: 2,
    AgendaPriority.URGENT: 3,
    AgendaPriority.CRITICAL: 4,
}


class MeetingAtmosphere(str, Enum):
    HARMONIOUS = "harmonious"            # Unity, consensus
    TENSE = "tense"                      # Disagreements present
    CONFRONTATIONAL = "confrontational"  # Open conflict
    PERFORMATIVE = "performative"        # Going through the motions


class DecisionOutcome(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    DEFERRED = "deferred"
    AMENDED_AND_APPROVED = "amendedAndApproved"
    REFERRED = "referredToSubcommittee"


class SCRank(str, Enum):
    """Rank within the committee. Membership is separate from administrative position."""
    CANDIDATE_MEMBER = "candidateMember"  # Advisory vote only
    FULL_MEMBER = "fullMember"            # Full voting rights
    CHAIRMAN = "chairman"                 # Chairs the committee


class RelationshipStance(str, Enum):
    STRONG_ALLY = "strongAlly"
    WEAK_ALLY = "weakAlly"
    TRUSTING = "trusting"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    DISTRUSTFUL = "distrustful"
    HOSTILE = "hostile"
    RIVAL = "rival"
    BITTER_ENEMY = "bitterEnemy"

    @property
    def display_name(self) -> str:
        return STANCE_NAMES[self]


STANCE_NAMES: dict[RelationshipStance, str] = {
    RelationshipStance.STRONG_ALLY: "Strong Ally",
    RelationshipStance.WEAK_ALLY: "Weak Ally",
    RelationshipStance.TRUSTING: "Trusting",
    RelationshipStance.FRIENDLY: "Friendly",
    RelationshipStance.NEUTRAL: "Neutral",
    RelationshipStance.DISTRUSTFUL: "Distrustful",
    RelationshipStance.HOSTILE: "Hostile",
    RelationshipStance.RIVAL: "Rival",
    RelationshipStance.BITTER_ENEMY: "Bitter Enemy",
}


class AllianceBreakReason(str, Enum):
    MUTUAL_AGREEMENT = "mutualAgreement"
    BETRAYAL = "betrayal"
    EXTERNAL_PRESSURE = "externalPressure"
    DIVERGING_INTERESTS = "divergingInterests"


# -----------------------------------------------------------------------------
# External Records
# -----------------------------------------------------------------------------

def generate_id() -> str:
    return str(uuid4())[:8]


class Character(BaseModel):
    """A character from the game's registry. Only senior tenure is written here."""
    id: str = Field(default_factory=generate_id)
    name: str = ""
    status: CharacterStatus = CharacterStatus.ACTIVE
    position_index: int | None = None  # None = holds no position
    faction_id: str | None = None

    # Personality traits (0-100)
    ambition: int = Field(default=50, ge=0, le=100)
    paranoia: int = Field(default=50, ge=0, le=100)
    ruthlessness: int = Field(default=50, ge=0, le=100)
    competence: int = Field(default=50, ge=0, le=100)
    loyalty: int = Field(default=50, ge=0, le=100)

    turns_at_senior_position: int = 0  # Turns spent at position 4+

    @property
    def is_alive(self) -> bool:
        return self.status not in (CharacterStatus.DEAD, CharacterStatus.EXECUTED)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class Faction(BaseModel):
    """A faction from the game's registry."""
    faction_id: str
    name: str = ""
    power: int = Field(default=50, ge=0, le=100)


# -----------------------------------------------------------------------------
# Relationship Graph
# -----------------------------------------------------------------------------

class RelationshipEdge(BaseModel):
    """
    One NPC's view of another.

    Relationships are asymmetric: A's view of B is a separate record from
    B's view of A. Edges are never deleted, only decayed toward neutrality.
    State changes go through the intent-named functions in rules.relationship.
    """
    source_id: str  # The NPC holding this view
    target_id: str  # The NPC being viewed

    # Core metrics
    disposition: int = Field(default=0, ge=-100, le=100)
    trust: int = Field(default=50, ge=0, le=100)
    fear: int = Field(default=0, ge=0, le=100)
    respect: int = Field(default=50, ge=0, le=100)

    # Formal relationship states
    is_allied: bool = False
    is_rival: bool = False
    is_patron: bool = False  # Source is patron of target
    is_client: bool = False  # Source is client of target

    # Alliance specifics
    alliance_strength: int = Field(default=0, ge=0, le=100)
    alliance_formed_turn: int | None = None

    # Grudge/gratitude accumulators (decay over time)
    grudge_level: int = Field(default=0, ge=0, le=100)
    gratitude_level: int = Field(default=0, ge=0, le=100)

    # History
    times_betrayed: int = 0   # Betrayals by target
    times_benefited: int = 0  # Benefits from target
    last_interaction_turn: int = 0
    relationship_start_turn: int = 0
    last_decay_turn: int | None = None  # Guards against decaying twice in one turn
    shared_enemy_ids: list[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_id, self.target_id)

    @property
    def overall_quality(self) -> int:
        from ..rules.relationship import overall_quality
        return overall_quality(self)

    @property
    def would_help(self) -> bool:
        from ..rules.relationship import would_help
        return would_help(self)

    @property
    def would_oppose(self) -> bool:
        from ..rules.relationship import would_oppose
        return would_oppose(self)

    @property
    def would_betray(self) -> bool:
        from ..rules.relationship import would_betray
        return would_betray(self)

    @property
    def stance(self) -> RelationshipStance:
        from ..rules.relationship import stance
        return stance(self)

    @property
    def ai_context(self) -> str:
        from ..rules.relationship import ai_context
        return ai_context(self)


class RelationshipGraph(BaseModel):
    """All directed NPC-to-NPC edges, one per ordered pair."""
    edges: list[RelationshipEdge] = Field(default_factory=list)

    _index: dict[tuple[str, str], RelationshipEdge] = PrivateAttr(default_factory=dict)

    @field_validator("edges", mode="wrap")
    @classmethod
    def _recover_edges(cls, value, handler):
        """Corrupt relationship data recovers to an empty graph."""
        try:
            return handler(value)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable relationship edges: {e.error_count()} errors")
            return []

    def model_post_init(self, __context) -> None:
        """Index edges by ordered pair, keeping the first of any duplicates."""
        unique = []
        for edge in self.edges:
            if edge.key in self._index:
                continue
            self._index[edge.key] = edge
            unique.append(edge)
        self.edges = unique

    def get(self, source_id: str, target_id: str) -> RelationshipEdge | None:
        """Find the edge from source to target."""
        return self._index.get((source_id, target_id))

    def add(self, edge: RelationshipEdge) -> RelationshipEdge:
        """Add an edge. Returns the existing edge if the pair is already present."""
        existing = self._index.get(edge.key)
        if existing is not None:
            return existing
        self._index[edge.key] = edge
        self.edges.append(edge)
        return edge

    def edges_from(self, source_id: str) -> list[RelationshipEdge]:
        """All edges held by source."""
        return [e for e in self.edges if e.source_id == source_id]

    def edges_to(self, target_id: str) -> list[RelationshipEdge]:
        """All edges pointing at target."""
        return [e for e in self.edges if e.target_id == target_id]


# -----------------------------------------------------------------------------
# Agenda, Decisions, Meetings
# -----------------------------------------------------------------------------

class AgendaItem(BaseModel):
    """A proposal awaiting a committee vote."""
    id: str = Field(default_factory=generate_id)
    title: str
    description: str = ""
    category: AgendaCategory
    priority: AgendaPriority = AgendaPriority.ROUTINE
    sponsor_id: str | None = None  # Who submitted this item
    turn_submitted: int = 0

    # Voting tracking
    has_been_voted: bool = False
    votes_for: list[str] = Field(default_factory=list)
    votes_against: list[str] = Field(default_factory=list)
    abstentions: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _votes_are_disjoint(self) -> "AgendaItem":
        seen: set[str] = set()
        for bucket in (self.votes_for, self.votes_against, self.abstentions):
            overlap = seen.intersection(bucket)
            if overlap:
                raise ValueError(f"Members voted more than once: {sorted(overlap)}")
            seen.update(bucket)
        return self

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self.priority]

    @property
    def passed(self) -> bool:
        return len(self.votes_for) > len(self.votes_against)

    @property
    def was_unanimous(self) -> bool:
        return not self.votes_against and not self.abstentions

    def with_votes(
        self,
        votes_for: list[str],
        votes_against: list[str],
        abstentions: list[str],
    ) -> "AgendaItem":
        """Return a voted copy of this item. The pending item is left untouched."""
        return self.model_validate({
            **self.model_dump(),
            "has_been_voted": True,
            "votes_for": list(votes_for),
            "votes_against": list(votes_against),
            "abstentions": list(abstentions),
        })


class VotingRecord(BaseModel):
    """Vote tally for one decision."""
    model_config = ConfigDict(frozen=True)

    votes_for: int = 0
    votes_against: int = 0
    abstentions: int = 0
    is_unanimous: bool = False

    @property
    def total_votes(self) -> int:
        return self.votes_for + self.votes_against + self.abstentions

    @property
    def passed_by_majority(self) -> bool:
        return self.votes_for > self.votes_against


class Decision(BaseModel):
    """Outcome of one agenda item. Created once, never mutated."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    agenda_item_id: str
    item: AgendaItem  # The full voted item lives only here after the meeting
    outcome: DecisionOutcome
    voting_record: VotingRecord
    dissenter_ids: list[str] = Field(default_factory=list)  # Who opposed (may face consequences)
    summary: str = ""


class MeetingRecord(BaseModel):
    """One convened session. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    turn_held: int
    attendee_ids: list[str] = Field(default_factory=list)  # Membership snapshot
    items_discussed: list[str] = Field(default_factory=list)  # Agenda item IDs
    decisions: list[Decision] = Field(default_factory=list)
    atmosphere: MeetingAtmosphere


# -----------------------------------------------------------------------------
# Committee
# -----------------------------------------------------------------------------

class CommitteeMembership(BaseModel):
    """
    The Standing Committee roster and its records.

    Invariants:
    - full + candidate members <= COMMITTEE_SEATS
    - chair (if set) is a full member or PLAYER_ID
    - faction_balance is recomputed whenever the roster changes
    """
    full_member_ids: list[str] = Field(default_factory=list)
    candidate_member_ids: list[str] = Field(default_factory=list)
    chair_id: str | None = None
    secretary_id: str | None = None

    # Player seat (the player is not in the character registry)
    player_on_committee: bool = False
    player_rank: SCRank | None = None

    last_meeting_turn: int = 0
    faction_balance: dict[str, int] = Field(default_factory=dict)

    pending_agenda: list[AgendaItem] = Field(default_factory=list)
    meeting_history: list[MeetingRecord] = Field(default_factory=list)

    @field_validator("pending_agenda", "meeting_history", mode="wrap")
    @classmethod
    def _recover_history(cls, value, handler):
        """Corrupt agenda or minutes recover to an empty list."""
        try:
            return handler(value)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable committee records: {e.error_count()} errors")
            return []

    @field_validator("faction_balance", mode="wrap")
    @classmethod
    def _recover_balance(cls, value, handler):
        try:
            return handler(value)
        except ValidationError:
            return {}

    @model_validator(mode="after")
    def _enforce_roster(self) -> "CommitteeMembership":
        # Ordered sets: drop repeats and anyone listed twice across ranks
        full = list(dict.fromkeys(self.full_member_ids))
        candidates = [
            cid for cid in dict.fromkeys(self.candidate_member_ids) if cid not in full
        ]
        if len(full) + len(candidates) > COMMITTEE_SEATS:
            logger.warning("Committee roster over seat limit; trimming candidate members")
            candidates = candidates[: max(0, COMMITTEE_SEATS - len(full))]
            full = full[:COMMITTEE_SEATS]
        self.full_member_ids = full
        self.candidate_member_ids = candidates
        if self.chair_id is not None and self.chair_id != PLAYER_ID and self.chair_id not in full:
            self.chair_id = None
        return self

    @property
    def member_ids(self) -> list[str]:
        """All member IDs (full then candidate)."""
        return self.full_member_ids + self.candidate_member_ids

    @property
    def seat_count(self) -> int:
        """Occupied seats, counting the player's."""
        return len(self.member_ids) + (1 if self.player_on_committee else 0)

    def vacancies(self, max_seats: int = COMMITTEE_SEATS) -> int:
        return max(0, min(max_seats, COMMITTEE_SEATS) - len(self.member_ids))

    def is_member(self, character_id: str) -> bool:
        return character_id in self.member_ids or character_id == self.chair_id

    def rank_of(self, character_id: str) -> SCRank | None:
        """Get the committee rank for a character."""
        if character_id == self.chair_id:
            return SCRank.CHAIRMAN
        if character_id in self.full_member_ids:
            return SCRank.FULL_MEMBER
        if character_id in self.candidate_member_ids:
            return SCRank.CANDIDATE_MEMBER
        return None

    # --- Roster changes (each refreshes faction balance) ---

    def set_roster(
        self,
        full_ids: list[str],
        candidate_ids: list[str],
        chair_id: str | None,
        characters: Iterable[Character],
    ) -> None:
        """Replace the whole roster. Used by elections and initialization."""
        full = list(dict.fromkeys(full_ids))[:COMMITTEE_SEATS]
        candidates = [c for c in dict.fromkeys(candidate_ids) if c not in full]
        self.full_member_ids = full
        self.candidate_member_ids = candidates[: COMMITTEE_SEATS - len(full)]
        self.chair_id = chair_id if chair_id in full or chair_id == PLAYER_ID else None
        self.refresh_faction_balance(characters)

    def add_candidate(
        self,
        character_id: str,
        characters: Iterable[Character],
        max_seats: int = COMMITTEE_SEATS,
    ) -> bool:
        """Seat a candidate member. False if already seated or no seat is free."""
        if character_id in self.member_ids or self.vacancies(max_seats) <= 0:
            return False
        self.candidate_member_ids.append(character_id)
        self.refresh_faction_balance(characters)
        return True

    def remove_member(self, character_id: str, characters: Iterable[Character]) -> bool:
        """Unseat a member. The chair is cleared if it was theirs."""
        if character_id not in self.member_ids:
            return False
        self.full_member_ids = [m for m in self.full_member_ids if m != character_id]
        self.candidate_member_ids = [m for m in self.candidate_member_ids if m != character_id]
        if self.chair_id == character_id:
            self.chair_id = None
        if self.secretary_id == character_id:
            self.secretary_id = None
        self.refresh_faction_balance(characters)
        return True

    def set_chair(self, character_id: str | None) -> bool:
        """Set the chair. Must be a full member or the player."""
        if character_id is None or character_id == PLAYER_ID or character_id in self.full_member_ids:
            self.chair_id = character_id
            return True
        return False

    def refresh_faction_balance(self, characters: Iterable[Character]) -> dict[str, int]:
        """Recompute members per faction from the current roster."""
        by_id = {c.id: c for c in characters}
        balance: dict[str, int] = {}
        for member_id in self.member_ids:
            member = by_id.get(member_id)
            if member is not None and member.faction_id:
                balance[member.faction_id] = balance.get(member.faction_id, 0) + 1
        self.faction_balance = balance
        return balance

    # --- Player seat ---

    def add_player(self, rank: SCRank) -> None:
        self.player_on_committee = True
        self.player_rank = rank
        if rank == SCRank.CHAIRMAN:
            self.chair_id = PLAYER_ID

    def remove_player(self) -> None:
        self.player_on_committee = False
        self.player_rank = None
        if self.chair_id == PLAYER_ID:
            self.chair_id = None

    def promote_player(self, rank: SCRank) -> None:
        if not self.player_on_committee:
            return
        self.player_rank = rank
        if rank == SCRank.CHAIRMAN:
            self.chair_id = PLAYER_ID

    @property
    def player_is_full_member(self) -> bool:
        return self.player_rank in (SCRank.FULL_MEMBER, SCRank.CHAIRMAN)

    @property
    def player_is_chair(self) -> bool:
        return self.player_rank == SCRank.CHAIRMAN


# -----------------------------------------------------------------------------
# Game Context (boundary with the surrounding game)
# -----------------------------------------------------------------------------

class GameContext(BaseModel):
    """
    Everything the committee core reads from the surrounding game.

    The relationship graph is shared, mutable state; the rest is read-only here.
    """
    characters: list[Character] = Field(default_factory=list)
    factions: list[Faction] = Field(default_factory=list)
    stability: int = Field(default=50, ge=0, le=100)
    turn: int = 0
    relationships: RelationshipGraph = Field(default_factory=RelationshipGraph)

    def character(self, character_id: str | None) -> Character | None:
        """Find a character by ID."""
        if character_id is None:
            return None
        for character in self.characters:
            if character.id == character_id:
                return character
        return None

    def faction(self, faction_id: str | None) -> Faction | None:
        """Find a faction by ID."""
        if faction_id is None:
            return None
        for faction in self.factions:
            if faction.faction_id == faction_id:
                return faction
        return None

    def members(self, committee: CommitteeMembership) -> list[Character]:
        """Resolve seated member IDs to characters, skipping unknown IDs."""
        resolved = []
        for member_id in committee.member_ids:
            character = self.character(member_id)
            if character is not None:
                resolved.append(character)
        return resolved


# -----------------------------------------------------------------------------
# Persisted Root
# -----------------------------------------------------------------------------

class SimulationSave(BaseModel):
    """
    Persisted committee and relationship state.

    This is the root model that gets serialized to JSON.
    Versioned for migration support.
    """
    schema_version: str = "1.0.0"
    saved_at: datetime = Field(default_factory=datetime.now)

    id: str = Field(default_factory=generate_id)
    name: str = "Untitled"
    committee: CommitteeMembership | None = None
    relationships: RelationshipGraph = Field(default_factory=RelationshipGraph)

    @field_validator("committee", mode="wrap")
    @classmethod
    def _recover_committee(cls, value, handler):
        try:
            return handler(value)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable committee: {e.error_count()} errors")
            return None

    @classmethod
    def from_json(cls, raw: str | bytes) -> "SimulationSave":
        """Decode a save. Falls back to an empty save on any failure."""
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Save data unreadable, starting fresh: {e.error_count()} errors")
            return cls()

    def save_checkpoint(self) -> None:
        """Update timestamp before save."""
        self.saved_at = datetime.now()
