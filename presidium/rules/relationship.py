"""
NPC-to-NPC relationship rules as pure functions.

Queries read an edge; the apply_* functions are the only code that writes
edge fields, so alliance/rivalry side effects stay consistent. All values
are clamped to their ranges and integer division truncates toward zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state.schema import AllianceBreakReason, RelationshipStance

if TYPE_CHECKING:
    from ..state.schema import RelationshipEdge


# Idle turns before each accumulator starts to decay (strictly more than)
GRUDGE_IDLE_TURNS = 3
GRATITUDE_IDLE_TURNS = 2
FEAR_IDLE_TURNS = 4

GRUDGE_DECAY = 2
GRATITUDE_DECAY = 3
FEAR_DECAY = 5
FEAR_FLOOR = 20


def tdiv(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (-7/4 -> -1)."""
    return int(numerator / denominator)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------

def overall_quality(edge: "RelationshipEdge") -> int:
    """
    Overall relationship quality (-100 to 100).

    Disposition, adjusted by trust and respect deviation from neutral 50,
    plus gratitude minus grudge, plus +20 allied / -30 rival.
    """
    quality = edge.disposition
    quality += tdiv(edge.trust - 50, 2)
    quality += tdiv(edge.respect - 50, 2)
    quality += edge.gratitude_level // 3
    quality -= edge.grudge_level // 2
    if edge.is_allied:
        quality += 20
    if edge.is_rival:
        quality -= 30
    return clamp(quality, -100, 100)


def would_help(edge: "RelationshipEdge") -> bool:
    """Whether source would help target."""
    if edge.is_allied and edge.alliance_strength >= 30:
        return True
    return overall_quality(edge) >= 40 and edge.trust >= 40


def would_oppose(edge: "RelationshipEdge") -> bool:
    """Whether source would actively work against target."""
    if edge.is_rival:
        return True
    return overall_quality(edge) <= -40 or edge.grudge_level >= 60


def would_betray(edge: "RelationshipEdge") -> bool:
    """Whether source would betray target given the opportunity."""
    if edge.is_allied and edge.alliance_strength >= 60:
        return False  # Strong alliances resist betrayal

    incentive = edge.grudge_level + (100 - edge.fear)
    return incentive >= 120 or edge.times_betrayed > 0


def stance(edge: "RelationshipEdge") -> RelationshipStance:
    """Classify the relationship. First matching threshold wins."""
    if edge.is_allied and edge.alliance_strength >= 50:
        return RelationshipStance.STRONG_ALLY
    if edge.is_allied:
        return RelationshipStance.WEAK_ALLY
    if edge.is_rival and edge.grudge_level >= 50:
        return RelationshipStance.BITTER_ENEMY
    if edge.is_rival:
        return RelationshipStance.RIVAL

    quality = overall_quality(edge)
    if quality >= 60:
        return RelationshipStance.FRIENDLY
    if quality <= -60:
        return RelationshipStance.HOSTILE
    if quality <= -20:
        return RelationshipStance.DISTRUSTFUL
    if edge.trust >= 60:
        return RelationshipStance.TRUSTING
    return RelationshipStance.NEUTRAL


def ai_context(edge: "RelationshipEdge") -> str:
    """One-line summary for narrative generation prompts."""
    context = f"{edge.source_id} -> {edge.target_id}: {stance(edge).display_name}"
    if edge.is_allied:
        context += f" (Allied, strength {edge.alliance_strength})"
    if edge.is_rival:
        context += " (Rival)"
    if edge.grudge_level > 30:
        context += f" [Grudge: {edge.grudge_level}]"
    if edge.gratitude_level > 30:
        context += f" [Gratitude: {edge.gratitude_level}]"
    return context


# -----------------------------------------------------------------------------
# Mutations
# -----------------------------------------------------------------------------

def apply_betrayal(edge: "RelationshipEdge", turn: int, severity: int) -> None:
    """Target betrayed source. Ends any alliance and flips it to rivalry."""
    severity = max(0, severity)
    edge.times_betrayed += 1
    edge.disposition = clamp(edge.disposition - severity, -100, 100)
    edge.trust = clamp(edge.trust - tdiv(severity, 2), 0, 100)
    edge.grudge_level = clamp(edge.grudge_level + severity, 0, 100)
    edge.last_interaction_turn = turn

    if edge.is_allied:
        edge.is_allied = False
        edge.alliance_strength = 0
        edge.is_rival = True


def apply_benefit(edge: "RelationshipEdge", turn: int, magnitude: int) -> None:
    """Target did source a good turn."""
    magnitude = max(0, magnitude)
    edge.times_benefited += 1
    edge.disposition = clamp(edge.disposition + tdiv(magnitude, 2), -100, 100)
    edge.trust = clamp(edge.trust + tdiv(magnitude, 4), 0, 100)
    edge.gratitude_level = clamp(edge.gratitude_level + tdiv(magnitude, 2), 0, 100)
    edge.last_interaction_turn = turn


def apply_alliance(edge: "RelationshipEdge", turn: int, strength: int) -> None:
    """Form an alliance. Clears rivalry; disposition rises to at least +30."""
    edge.is_allied = True
    edge.is_rival = False
    edge.alliance_strength = clamp(strength, 0, 100)
    edge.alliance_formed_turn = turn
    edge.disposition = max(edge.disposition, 30)
    edge.trust = clamp(edge.trust + 10, 0, 100)
    edge.last_interaction_turn = turn


def apply_alliance_break(
    edge: "RelationshipEdge",
    turn: int,
    reason: AllianceBreakReason,
) -> None:
    """End an alliance. Betrayal also turns it into a rivalry."""
    edge.is_allied = False
    edge.alliance_strength = 0

    if reason == AllianceBreakReason.BETRAYAL:
        edge.is_rival = True
        edge.grudge_level = clamp(edge.grudge_level + 40, 0, 100)
        edge.trust = clamp(edge.trust - 30, 0, 100)
    elif reason == AllianceBreakReason.EXTERNAL_PRESSURE:
        edge.trust = clamp(edge.trust - 10, 0, 100)

    edge.last_interaction_turn = turn


def apply_rivalry(edge: "RelationshipEdge", turn: int) -> None:
    """Declare rivalry. Ends any alliance; disposition capped at 0."""
    edge.is_rival = True
    edge.is_allied = False
    edge.alliance_strength = 0
    edge.disposition = min(0, edge.disposition)
    edge.last_interaction_turn = turn


def apply_fear(edge: "RelationshipEdge", turn: int, amount: int) -> None:
    edge.fear = clamp(edge.fear + max(0, amount), 0, 100)
    edge.last_interaction_turn = turn


def apply_respect(edge: "RelationshipEdge", turn: int, amount: int) -> None:
    edge.respect = clamp(edge.respect + max(0, amount), 0, 100)
    edge.last_interaction_turn = turn


def apply_shared_enemy(edge: "RelationshipEdge", turn: int, enemy_id: str) -> None:
    if enemy_id not in edge.shared_enemy_ids and enemy_id not in edge.key:
        edge.shared_enemy_ids.append(enemy_id)
    edge.last_interaction_turn = turn


def apply_decay(edge: "RelationshipEdge", current_turn: int) -> bool:
    """
    Decay grudge, gratitude and fear toward neutrality.

    Runs at most once per turn: returns False without changing anything if
    this edge already decayed at current_turn (or later).
    """
    if edge.last_decay_turn is not None and current_turn <= edge.last_decay_turn:
        return False

    idle = current_turn - edge.last_interaction_turn

    # Grudges decay slowly
    if edge.grudge_level > 0 and idle > GRUDGE_IDLE_TURNS:
        edge.grudge_level = max(0, edge.grudge_level - GRUDGE_DECAY)

    # Gratitude decays faster
    if edge.gratitude_level > 0 and idle > GRATITUDE_IDLE_TURNS:
        edge.gratitude_level = max(0, edge.gratitude_level - GRATITUDE_DECAY)

    # Fear fades if not reinforced, but never below the floor
    if edge.fear > FEAR_FLOOR and idle > FEAR_IDLE_TURNS:
        edge.fear = max(FEAR_FLOOR, edge.fear - FEAR_DECAY)

    edge.last_decay_turn = current_turn
    return True
