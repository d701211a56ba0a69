import pytest
from pydantic import ValidationError

from memory_graph.errors import StorageError
from memory_graph.knowledge_graph import Entity
from memory_graph.knowledge_graph.observations import ObservationStore


def _entity(name="John_Smith", **kw):
    data = {"name": name, "entityType": "person", "observations": ["Speaks fluent Spanish"]}
    data.update(kw)
    return data


def test_create_entities_is_idempotent(manager):
    first = manager.create_entities([_entity()])
    second = manager.create_entities([_entity(entityType="robot")])

    assert [e.name for e in first] == ["John_Smith"]
    assert second == []

    graph = manager.read_graph()
    assert len(graph.entities) == 1
    assert graph.entities[0].entity_type == "person"
    assert graph.entities[0].observations == ["Speaks fluent Spanish"]


def test_create_entities_returns_only_new(manager):
    manager.create_entities([_entity("A")])
    created = manager.create_entities([_entity("A"), _entity("B")])
    assert [e.name for e in created] == ["B"]


def test_create_entities_accepts_models(manager):
    created = manager.create_entities([Entity(name="Bot", entity_type="agent")])
    assert created == [Entity(name="Bot", entity_type="agent", observations=[], tags=[])]


def test_created_entity_wire_shape(manager):
    created = manager.create_entities([_entity(tags=["vip"])])
    assert created[0].to_wire() == {
        "name": "John_Smith",
        "entityType": "person",
        "observations": ["Speaks fluent Spanish"],
        "tags": ["vip"],
    }


def test_repeated_observations_and_tags_collapse(manager):
    created = manager.create_entities(
        [_entity(observations=["x", "y", "x"], tags=["t", "t"])]
    )
    assert created[0].observations == ["x", "y"]
    assert created[0].tags == ["t"]

    stored = manager.open_nodes(["John_Smith"]).entities[0]
    assert sorted(stored.observations) == ["x", "y"]
    assert stored.tags == ["t"]


def test_same_content_on_two_entities_stays_separate(manager):
    manager.create_entities(
        [_entity("A", observations=["shared"]), _entity("B", observations=["shared"])]
    )
    manager.delete_entities(["A"])

    graph = manager.read_graph()
    assert [e.name for e in graph.entities] == ["B"]
    assert graph.entities[0].observations == ["shared"]


def test_create_entities_reuses_existing_tags(manager):
    manager.create_tags([{"name": "vip", "category": "status"}])
    manager.create_entities([_entity(tags=["vip"])])

    tags = manager.get_all_tags()
    assert len(tags) == 1
    assert tags[0].category == "status"


def test_invalid_entity_is_rejected_before_storage(manager):
    with pytest.raises(ValidationError):
        manager.create_entities([{"name": "NoType"}])
    assert manager.read_graph().entities == []


def test_quotes_round_trip(manager):
    name = "O'Brien \"the\" \\ builder"
    manager.create_entities([_entity(name, observations=["It's 'quoted'"])])

    entity = manager.open_nodes([name]).entities[0]
    assert entity.name == name
    assert entity.observations == ["It's 'quoted'"]


def test_failure_mid_create_leaves_no_partial_entity(manager, monkeypatch):
    real_create = ObservationStore.create
    calls = []

    def flaky(self, entity_name, content):
        calls.append(content)
        if len(calls) == 2:
            raise StorageError("disk full")
        return real_create(self, entity_name, content)

    monkeypatch.setattr(ObservationStore, "create", flaky)

    with pytest.raises(StorageError):
        manager.create_entities([_entity(observations=["one", "two", "three"])])

    monkeypatch.undo()
    graph = manager.read_graph()
    assert graph.entities == []
    assert manager.search_nodes("one").entities == []


def test_delete_entities_cascades(seeded):
    seeded.delete_entities(["John_Smith"])

    graph = seeded.read_graph()
    names = {e.name for e in graph.entities}
    assert "John_Smith" not in names
    assert all("John_Smith" not in (r.source, r.target) for r in graph.relations)
    assert seeded.search_nodes("spanish").entities == []


def test_delete_removes_owned_observations(seeded):
    seeded.delete_entities(["John_Smith"])
    # nothing left that could be swept
    assert seeded.observations.sweep_orphans() == 0
    all_obs = {o.content for o in seeded.observations.for_entities()}
    assert all_obs == {"Likes chess", "AI safety company"}


def test_delete_unknown_entity_is_noop(seeded):
    before = seeded.read_graph()
    seeded.delete_entities(["Nobody"])
    assert seeded.read_graph() == before


def test_delete_keeps_shared_tags(seeded):
    seeded.tag_entity("Jane_Doe", ["vip"])
    seeded.delete_entities(["John_Smith"])

    assert "vip" in [t.name for t in seeded.get_all_tags()]
    assert seeded.open_nodes(["Jane_Doe"]).entities[0].tags == ["vip"]


def test_sweep_reclaims_orphans(manager):
    manager.create_entities([_entity()])
    # detach the observation from its owner without deleting it
    manager.store.query("MATCH (:Entity)-[r:HAS_OBSERVATION]->(:Observation) DELETE r")

    assert manager.observations.sweep_orphans() == 1
    assert manager.observations.sweep_orphans() == 0
