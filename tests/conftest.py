"""
Pytest fixtures for Standing Committee tests.

Provides a character factory, a fixed random source and small ready-made
committees for isolated testing.
"""

import pytest
from pathlib import Path

# Add repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from presidium.state import (
    Character,
    CommitteeMembership,
    EventBus,
    Faction,
    GameContext,
    MemoryCommitteeStore,
)


class FixedRNG:
    """Random source whose perturbations are all zero."""

    def __init__(self, roll: float = 1.0):
        self.roll = roll  # 1.0 never falls under an abstain chance

    def random(self) -> float:
        return self.roll

    def randint(self, a: int, b: int) -> int:
        return max(a, min(b, 0))

    def uniform(self, a: float, b: float) -> float:
        return max(a, min(b, 0.0))


def make_character(character_id: str, **overrides) -> Character:
    """An eligible senior office holder unless overridden."""
    fields = {
        "id": character_id,
        "name": character_id.title(),
        "position_index": 6,
        "faction_id": "reformist",
        "turns_at_senior_position": 12,
        "competence": 60,
        "loyalty": 60,
    }
    fields.update(overrides)
    return Character(**fields)


@pytest.fixture
def rng():
    """Random source with zero perturbation."""
    return FixedRNG()


@pytest.fixture
def bus():
    """Fresh event bus."""
    return EventBus()


@pytest.fixture
def memory_store():
    """In-memory save store for testing."""
    return MemoryCommitteeStore()


@pytest.fixture
def factions():
    return [
        Faction(faction_id="reformist", name="Reformists", power=60),
        Faction(faction_id="oldguard", name="Old Guard", power=40),
    ]


@pytest.fixture
def seven_candidates():
    """Seven eligible characters; only 'gensec' holds a chair-rank position."""
    return [
        make_character("gensec", position_index=8),
        make_character("alpha", position_index=7),
        make_character("bravo", position_index=7, faction_id="oldguard"),
        make_character("charlie", position_index=6),
        make_character("delta", position_index=6, faction_id="oldguard"),
        make_character("echo", position_index=5),
        make_character("foxtrot", position_index=5, faction_id="oldguard"),
    ]


@pytest.fixture
def context(seven_candidates, factions):
    """Game context with seven eligible characters and two factions."""
    return GameContext(
        characters=seven_candidates,
        factions=factions,
        stability=60,
        turn=20,
    )


@pytest.fixture
def five_member_context(factions):
    """
    Five full members, loyalties 80, 80, 80, 20, 20.

    The chair and the three loyalists sit in the majority faction.
    """
    characters = [
        make_character("chair", loyalty=80, position_index=8),
        make_character("loyal1", loyalty=80),
        make_character("loyal2", loyalty=80),
        make_character("doubter1", loyalty=20, faction_id="oldguard"),
        make_character("doubter2", loyalty=20, faction_id="oldguard"),
    ]
    return GameContext(characters=characters, factions=factions, stability=60, turn=5)


@pytest.fixture
def five_member_committee(five_member_context):
    committee = CommitteeMembership()
    committee.set_roster(
        ["chair", "loyal1", "loyal2", "doubter1", "doubter2"],
        [],
        "chair",
        five_member_context.characters,
    )
    return committee


@pytest.fixture
def character_factory():
    """Build characters by ID with eligible defaults."""
    return make_character
