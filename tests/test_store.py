"""
Tests for save persistence and corrupt-data recovery.
"""

import json

import pytest
from presidium.state import (
    AgendaCategory,
    AgendaItem,
    CommitteeMembership,
    JsonCommitteeStore,
    RelationshipEdge,
    RelationshipGraph,
    SimulationSave,
)
from presidium.state.schema import COMMITTEE_SEATS


@pytest.fixture
def populated_save():
    committee = CommitteeMembership(
        full_member_ids=["a", "b"],
        candidate_member_ids=["c"],
        chair_id="a",
        faction_balance={"reformist": 3},
    )
    committee.pending_agenda.append(
        AgendaItem(title="Grain quotas", category=AgendaCategory.ECONOMIC)
    )
    graph = RelationshipGraph(edges=[RelationshipEdge(source_id="a", target_id="b", disposition=40)])
    return SimulationSave(name="Test Save", committee=committee, relationships=graph)


class TestJsonStore:
    """Test file-based storage."""

    def test_round_trip(self, tmp_path, populated_save):
        store = JsonCommitteeStore(tmp_path)

        assert store.save(populated_save)
        loaded = store.load(populated_save.id)

        assert loaded.committee.member_ids == ["a", "b", "c"]
        assert loaded.committee.pending_agenda[0].title == "Grain quotas"
        assert loaded.relationships.get("a", "b").disposition == 40

    def test_backup_on_overwrite(self, tmp_path, populated_save):
        store = JsonCommitteeStore(tmp_path)
        store.save(populated_save)
        store.save(populated_save)

        assert (tmp_path / f"{populated_save.id}.json.bak").exists()

    def test_unknown_id(self, tmp_path):
        assert JsonCommitteeStore(tmp_path).load("missing") is None

    def test_partial_id(self, tmp_path, populated_save):
        store = JsonCommitteeStore(tmp_path)
        store.save(populated_save)

        assert store.load(populated_save.id[:4]).id == populated_save.id

    def test_corrupt_file_loads_default(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")

        loaded = JsonCommitteeStore(tmp_path).load("broken")

        assert loaded is not None
        assert loaded.committee is None
        assert loaded.relationships.edges == []

    def test_list_and_delete(self, tmp_path, populated_save):
        store = JsonCommitteeStore(tmp_path)
        store.save(populated_save)
        (tmp_path / "broken.json").write_text("{not json")

        assert [s["name"] for s in store.list_all()] == ["Test Save"]
        assert store.delete(populated_save.id)
        assert not store.exists(populated_save.id)
        assert not store.delete(populated_save.id)


class TestMemoryStore:
    """Test in-memory storage."""

    def test_save_and_load(self, memory_store, populated_save):
        assert memory_store.save(populated_save)
        assert memory_store.load(populated_save.id) is populated_save
        assert memory_store.load("nope") is None

    def test_clear(self, memory_store, populated_save):
        memory_store.save(populated_save)
        memory_store.clear()
        assert memory_store.list_all() == []


class TestDecodeRecovery:
    """Corrupt sections of a save recover to defaults."""

    def test_corrupt_agenda_and_history_become_empty(self):
        raw = json.dumps({
            "committee": {
                "full_member_ids": ["a"],
                "chair_id": "a",
                "pending_agenda": [{"title": "No category"}],
                "meeting_history": "garbage",
            },
        })

        save = SimulationSave.from_json(raw)

        assert save.committee.full_member_ids == ["a"]
        assert save.committee.pending_agenda == []
        assert save.committee.meeting_history == []

    def test_corrupt_edges_become_empty(self):
        raw = json.dumps({"relationships": {"edges": [{"source_id": "a"}]}})

        assert SimulationSave.from_json(raw).relationships.edges == []

    def test_corrupt_committee_becomes_none(self):
        raw = json.dumps({"name": "Kept", "committee": {"full_member_ids": 7}})

        save = SimulationSave.from_json(raw)

        assert save.name == "Kept"
        assert save.committee is None

    def test_undecodable_bytes_load_default(self, tmp_path):
        (tmp_path / "abc12345.json").write_bytes(b'{"name": "\xff\xfe bad"}')

        loaded = JsonCommitteeStore(tmp_path).load("abc12345")

        assert loaded is not None
        assert loaded.name == "Untitled"
        assert loaded.committee is None

    def test_unreadable_json_gives_default(self):
        save = SimulationSave.from_json("")
        assert save.schema_version == "1.0.0"
        assert save.committee is None


class TestCommitteeInvariants:
    """Roster rules hold however a committee is built."""

    def test_decoded_roster_trimmed_to_seat_limit(self):
        committee = CommitteeMembership(
            full_member_ids=[f"f{i}" for i in range(6)],
            candidate_member_ids=["c1", "c2", "c3"],
        )
        assert len(committee.member_ids) == COMMITTEE_SEATS
        assert committee.candidate_member_ids == ["c1"]

    def test_duplicates_removed(self):
        committee = CommitteeMembership(full_member_ids=["a", "a", "b"], candidate_member_ids=["b", "c"])

        assert committee.full_member_ids == ["a", "b"]
        assert committee.candidate_member_ids == ["c"]

    def test_chair_must_be_full_member(self):
        assert CommitteeMembership(candidate_member_ids=["a"], chair_id="a").chair_id is None
        assert not CommitteeMembership(full_member_ids=["a"]).set_chair("z")

    def test_removing_chair_clears_it(self, character_factory):
        a, b = character_factory("a"), character_factory("b", faction_id="oldguard")
        committee = CommitteeMembership()
        committee.set_roster(["a", "b"], [], "a", [a, b])

        assert committee.remove_member("a", [a, b])
        assert committee.chair_id is None
        assert committee.faction_balance == {"oldguard": 1}

    def test_overlapping_votes_rejected(self):
        with pytest.raises(ValueError):
            AgendaItem(
                title="X", category=AgendaCategory.POLICY,
                votes_for=["a"], abstentions=["a"],
            )

    def test_duplicate_edges_dropped(self):
        graph = RelationshipGraph(edges=[
            RelationshipEdge(source_id="a", target_id="b", disposition=10),
            RelationshipEdge(source_id="a", target_id="b", disposition=90),
        ])

        assert len(graph.edges) == 1
        assert graph.get("a", "b").disposition == 10
