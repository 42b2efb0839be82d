"""
Relationship graph service.

Owns all writes to the NPC-to-NPC graph. Every state change is an
intent-named operation that delegates to rules.relationship, so alliance
and rivalry side effects stay consistent no matter who calls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from ..rules import relationship as rules
from ..state.event_bus import EventType
from ..state.schema import AllianceBreakReason, RelationshipEdge, RelationshipGraph
from ..tools.rng import make_rng

if TYPE_CHECKING:
    from ..state.event_bus import EventBus
    from ..state.schema import Character
    from ..tools.rng import RandomSource

logger = logging.getLogger(__name__)


# Seeding for edges created on first contact
SAME_FACTION_SEED = {"disposition": 20, "trust": 60}
OTHER_FACTION_SEED = {"disposition": -10, "trust": 40}


def _same_faction(a: "Character", b: "Character") -> bool:
    return bool(a.faction_id) and a.faction_id == b.faction_id


class RelationshipSystem:
    """
    Reads and evolves a RelationshipGraph.

    Edges are created lazily on first interaction and never deleted.
    """

    def __init__(
        self,
        graph: RelationshipGraph | None = None,
        bus: "EventBus | None" = None,
        characters: Iterable["Character"] | None = None,
    ):
        self.graph = graph if graph is not None else RelationshipGraph()
        self._bus = bus
        self._characters: dict[str, "Character"] = {c.id: c for c in characters or []}

    def _emit(self, event_type: EventType, turn: int, **data) -> None:
        if self._bus is not None:
            self._bus.emit(event_type, turn=turn, **data)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, source_id: str, target_id: str) -> RelationshipEdge | None:
        """Find an edge without creating it."""
        return self.graph.get(source_id, target_id)

    def get_or_create(
        self,
        source_id: str,
        target_id: str,
        turn: int = 0,
        characters: Iterable["Character"] | None = None,
    ) -> RelationshipEdge:
        """
        Get the edge from source to target, creating it on first contact.

        When both characters are known, a new edge is seeded from faction
        alignment. Otherwise it starts neutral.
        """
        edge = self.graph.get(source_id, target_id)
        if edge is not None:
            return edge

        known = dict(self._characters)
        if characters is not None:
            known.update({c.id: c for c in characters})

        seed: dict[str, int] = {}
        source, target = known.get(source_id), known.get(target_id)
        if source is not None and target is not None:
            seed = SAME_FACTION_SEED if _same_faction(source, target) else OTHER_FACTION_SEED

        edge = RelationshipEdge(
            source_id=source_id,
            target_id=target_id,
            last_interaction_turn=turn,
            relationship_start_turn=turn,
            **seed,
        )
        return self.graph.add(edge)

    def initialize_relationships(
        self,
        characters: Iterable["Character"],
        turn: int = 0,
        rng: "RandomSource | None" = None,
    ) -> int:
        """
        Create every missing ordered pair among living characters.

        Returns the number of edges created.
        """
        rng = make_rng(rng)
        living = [c for c in characters if c.is_alive]
        self._characters.update({c.id: c for c in living})

        created = 0
        for source in living:
            for target in living:
                if source.id == target.id or self.graph.get(source.id, target.id) is not None:
                    continue

                if _same_faction(source, target):
                    disposition = 20 + rng.randint(0, 20)
                    trust = 50 + rng.randint(0, 20)
                else:
                    disposition = -10 + rng.randint(-10, 10)
                    trust = 40

                self.graph.add(RelationshipEdge(
                    source_id=source.id,
                    target_id=target.id,
                    disposition=disposition,
                    trust=trust,
                    last_interaction_turn=turn,
                    relationship_start_turn=turn,
                ))
                created += 1

        logger.debug(f"Initialized {created} relationship edges among {len(living)} characters")
        return created

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def record_betrayal(self, source_id: str, target_id: str, turn: int, severity: int) -> RelationshipEdge:
        """Target betrayed source."""
        edge = self.get_or_create(source_id, target_id, turn)
        was_allied = edge.is_allied
        rules.apply_betrayal(edge, turn, severity)
        self._emit(
            EventType.BETRAYAL, turn,
            source=source_id, target=target_id, severity=severity, ended_alliance=was_allied,
        )
        return edge

    def record_benefit(self, source_id: str, target_id: str, turn: int, magnitude: int) -> RelationshipEdge:
        """Target did something for source."""
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_benefit(edge, turn, magnitude)
        self._emit(EventType.BENEFIT, turn, source=source_id, target=target_id, magnitude=magnitude)
        return edge

    def form_alliance(self, source_id: str, target_id: str, turn: int, strength: int) -> RelationshipEdge:
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_alliance(edge, turn, strength)
        self._emit(
            EventType.ALLIANCE_FORMED, turn,
            source=source_id, target=target_id, strength=edge.alliance_strength,
        )
        return edge

    def break_alliance(
        self,
        source_id: str,
        target_id: str,
        turn: int,
        reason: AllianceBreakReason = AllianceBreakReason.MUTUAL_AGREEMENT,
    ) -> RelationshipEdge | None:
        """End an alliance. No-op (None) if the two were never allied."""
        edge = self.graph.get(source_id, target_id)
        if edge is None or not edge.is_allied:
            logger.warning(f"No alliance to break between {source_id} and {target_id}")
            return None
        rules.apply_alliance_break(edge, turn, reason)
        self._emit(
            EventType.ALLIANCE_BROKEN, turn,
            source=source_id, target=target_id, reason=reason.value,
        )
        return edge

    def declare_rivalry(self, source_id: str, target_id: str, turn: int) -> RelationshipEdge:
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_rivalry(edge, turn)
        self._emit(EventType.RIVALRY_DECLARED, turn, source=source_id, target=target_id)
        return edge

    def increase_fear(self, source_id: str, target_id: str, turn: int, amount: int) -> RelationshipEdge:
        """Source comes to fear target more."""
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_fear(edge, turn, amount)
        return edge

    def increase_respect(self, source_id: str, target_id: str, turn: int, amount: int) -> RelationshipEdge:
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_respect(edge, turn, amount)
        return edge

    def add_shared_enemy(self, source_id: str, target_id: str, enemy_id: str, turn: int) -> RelationshipEdge:
        """Record that source and target share an enemy."""
        edge = self.get_or_create(source_id, target_id, turn)
        rules.apply_shared_enemy(edge, turn, enemy_id)
        return edge

    # -------------------------------------------------------------------------
    # Decay
    # -------------------------------------------------------------------------

    def decay(self, source_id: str, target_id: str, current_turn: int) -> bool:
        """Decay one edge. False if it does not exist or already decayed this turn."""
        edge = self.graph.get(source_id, target_id)
        if edge is None:
            return False
        return rules.apply_decay(edge, current_turn)

    def decay_all(self, current_turn: int) -> int:
        """Decay every edge once for this turn. Returns how many edges decayed."""
        decayed = sum(1 for edge in self.graph.edges if rules.apply_decay(edge, current_turn))
        if decayed:
            logger.debug(f"Decayed {decayed} relationship edges at turn {current_turn}")
        return decayed

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def edges_from(self, source_id: str) -> list[RelationshipEdge]:
        return self.graph.edges_from(source_id)

    def edges_to(self, target_id: str) -> list[RelationshipEdge]:
        return self.graph.edges_to(target_id)

    def allies_of(self, source_id: str) -> list[str]:
        """IDs source considers allies."""
        return [e.target_id for e in self.graph.edges_from(source_id) if e.is_allied]

    def rivals_of(self, source_id: str) -> list[str]:
        """IDs source considers rivals."""
        return [e.target_id for e in self.graph.edges_from(source_id) if e.is_rival]
