#!/usr/bin/env python3
"""
Run the Standing Committee over a generated roster.

Seats a committee, then plays out turns: relationships drift, the
committee meets on a fixed cadence, and a Party Congress reselects it
every election interval. Each meeting and election is printed.

Usage:
    python scripts/simulate_sessions.py                    # 40 turns, seed 1
    python scripts/simulate_sessions.py --turns 100 --seed 7
    python scripts/simulate_sessions.py --json > save.json # Dump final save
    python scripts/simulate_sessions.py --save-dir saves   # Persist the run
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from presidium.config import load_config
from presidium.rules.narrative import meeting_headline
from presidium.state import (
    AgendaCategory,
    AgendaPriority,
    Character,
    EventBus,
    Faction,
    GameContext,
    JsonCommitteeStore,
    SimulationSave,
)
from presidium.systems import (
    ElectionService,
    MeetingOrchestrator,
    RelationshipSystem,
)
from presidium.tools import DeterministicRNG

logger = logging.getLogger(__name__)

FACTIONS = [
    Faction(faction_id="reformist", name="Reformists", power=55),
    Faction(faction_id="oldguard", name="Old Guard", power=60),
    Faction(faction_id="military", name="Military-Industrial", power=45),
]

SURNAMES = [
    "Volkov", "Petrova", "Lin", "Kowalski", "Hadzic", "Orlov", "Meng",
    "Sokolova", "Novak", "Zhou", "Radu", "Baranov", "Varga", "Chen",
]

AGENDA_TEMPLATES = [
    ("Adjust grain procurement quotas", AgendaCategory.ECONOMIC),
    ("Rotate regional party secretaries", AgendaCategory.PERSONNEL),
    ("Expand border security directorate", AgendaCategory.SECURITY),
    ("Launch study campaign on party history", AgendaCategory.IDEOLOGICAL),
    ("Respond to ambassador's recall", AgendaCategory.FOREIGN),
    ("Revise heavy industry targets", AgendaCategory.POLICY),
]

MEETING_INTERVAL = 4


def build_roster(rng: DeterministicRNG, size: int) -> list[Character]:
    """Generate office holders across every rank."""
    characters = []
    for i in range(size):
        characters.append(Character(
            id=f"npc{i:02d}",
            name=SURNAMES[i % len(SURNAMES)],
            position_index=rng.randint(3, 9),
            faction_id=rng.choice(FACTIONS).faction_id,
            ambition=rng.randint(20, 90),
            paranoia=rng.randint(20, 90),
            ruthlessness=rng.randint(20, 90),
            competence=rng.randint(35, 95),
            loyalty=rng.randint(30, 95),
            turns_at_senior_position=rng.randint(0, 24),
        ))
    return characters


def stir_relationships(
    relationships: RelationshipSystem,
    context: GameContext,
    rng: DeterministicRNG,
) -> None:
    """One random interaction per turn."""
    source, target = rng.choice(context.characters), rng.choice(context.characters)
    if source.id == target.id:
        return

    roll = rng.random()
    if roll < 0.15:
        relationships.record_betrayal(source.id, target.id, context.turn, rng.randint(10, 40))
    elif roll < 0.45:
        relationships.record_benefit(source.id, target.id, context.turn, rng.randint(10, 30))
    elif roll < 0.55:
        relationships.form_alliance(source.id, target.id, context.turn, rng.randint(30, 80))
    elif roll < 0.6:
        relationships.declare_rivalry(source.id, target.id, context.turn)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Simulate Standing Committee sessions over a generated roster",
    )
    parser.add_argument("--turns", "-t", type=int, default=40, help="Turns to simulate (default: 40)")
    parser.add_argument("--seed", "-s", type=int, default=1, help="Random seed (default: 1)")
    parser.add_argument("--roster", type=int, default=14, help="Number of characters (default: 14)")
    parser.add_argument("--config-dir", type=Path, help="Directory holding .presidium_config.json")
    parser.add_argument("--save-dir", type=Path, help="Persist the final save to this directory")
    parser.add_argument("--json", action="store_true", help="Print the final save as JSON")
    parser.add_argument("--debug", action="store_true", help="Log every vote")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
    )

    logger.info(f"Simulating {args.turns} turns with seed {args.seed}")

    config = load_config(args.config_dir) if args.config_dir else None
    rng = DeterministicRNG(args.seed)
    bus = EventBus()

    context = GameContext(
        characters=build_roster(rng, args.roster),
        factions=FACTIONS,
        stability=rng.randint(25, 85),
    )
    relationships = RelationshipSystem(context.relationships, bus=bus, characters=context.characters)
    elections = ElectionService(config, rng=rng, bus=bus)
    meetings = MeetingOrchestrator(config, rng=rng, bus=bus)

    relationships.initialize_relationships(context.characters, turn=0, rng=rng)
    committee = elections.initialize_committee(context)

    out = sys.stderr if args.json else sys.stdout

    for turn in range(1, args.turns + 1):
        context.turn = turn
        stir_relationships(relationships, context, rng)

        if elections.is_congress_turn(turn):
            result = elections.run_election(committee, context, turn)
            print(f"\n=== Turn {turn}: Party Congress ===", file=out)
            print(result.narrative, file=out)
        elif committee.vacancies(elections.config["max_seats"]) > 0:
            appointee = elections.fill_vacancy(committee, context)
            if appointee is not None:
                print(f"\nTurn {turn}: {appointee.display_name} co-opted to the committee", file=out)

        if turn % MEETING_INTERVAL == 0:
            for _ in range(rng.randint(1, 3)):
                title, category = rng.choice(AGENDA_TEMPLATES)
                meetings.submit_agenda_item(
                    committee,
                    title,
                    "",
                    category,
                    rng.choice(list(AgendaPriority)),
                    sponsor_id=rng.choice(committee.member_ids) if committee.member_ids else None,
                    turn=turn,
                )
            result = meetings.convene_meeting(committee, context)
            headline = meeting_headline(result.meeting.atmosphere)
            print(f"\n=== Turn {turn}: {headline.title} ===", file=out)
            print(result.narrative, file=out)
            for item_result in result.item_results:
                print(f"  - {item_result.item.title}: {item_result.outcome.value}", file=out)

        relationships.decay_all(turn)
        elections.update_senior_tenure(context)
        context.stability = max(0, min(100, context.stability + rng.randint(-3, 3)))

    save = SimulationSave(
        name=f"Simulation seed {args.seed}",
        committee=committee,
        relationships=context.relationships,
    )

    if args.save_dir:
        store = JsonCommitteeStore(args.save_dir)
        if not store.save(save):
            print(f"Could not write save to {args.save_dir}", file=sys.stderr)
            return 1
        print(f"\nSaved {save.id} to {args.save_dir}", file=out)

    if args.json:
        print(save.model_dump_json(indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
