import pytest

from memory_graph.errors import EntityNotFoundError
from memory_graph.knowledge_graph import AddedObservations


def test_add_observations_reports_only_new(seeded):
    result = seeded.add_observations(
        [{"entityName": "John_Smith", "contents": ["Speaks fluent Spanish", "Owns a cat"]}]
    )
    assert result == [
        AddedObservations(entity_name="John_Smith", added_observations=["Owns a cat"])
    ]
    assert result[0].to_wire() == {"entityName": "John_Smith", "addedObservations": ["Owns a cat"]}

    observations = seeded.open_nodes(["John_Smith"]).entities[0].observations
    assert sorted(observations) == ["Graduated in 2019", "Owns a cat", "Speaks fluent Spanish"]


def test_add_repeated_content_in_one_call(seeded):
    result = seeded.add_observations([{"entityName": "Jane_Doe", "contents": ["a", "a"]}])
    assert result[0].added_observations == ["a"]
    assert seeded.open_nodes(["Jane_Doe"]).entities[0].observations.count("a") == 1


def test_observations_listed_in_insertion_order(manager):
    manager.create_entities([{"name": "Log", "entityType": "journal"}])
    for content in ["first", "second", "third"]:
        manager.add_observations([{"entityName": "Log", "contents": [content]}])

    assert manager.open_nodes(["Log"]).entities[0].observations == ["first", "second", "third"]


def test_add_to_missing_entity_raises_and_changes_nothing(seeded):
    before = seeded.read_graph()
    with pytest.raises(EntityNotFoundError) as exc:
        seeded.add_observations([{"entityName": "Ghost", "contents": ["x"]}])

    assert exc.value.name == "Ghost"
    assert isinstance(exc.value, LookupError)
    assert seeded.read_graph() == before


def test_missing_entity_rolls_back_earlier_entries(seeded):
    with pytest.raises(EntityNotFoundError):
        seeded.add_observations(
            [
                {"entityName": "Jane_Doe", "contents": ["Plays go"]},
                {"entityName": "Ghost", "contents": ["x"]},
            ]
        )
    assert "Plays go" not in seeded.open_nodes(["Jane_Doe"]).entities[0].observations


def test_delete_observations(seeded):
    seeded.delete_observations(
        [{"entityName": "John_Smith", "observations": ["Speaks fluent Spanish"]}]
    )
    assert seeded.open_nodes(["John_Smith"]).entities[0].observations == ["Graduated in 2019"]
    assert seeded.search_nodes("spanish").entities == []


def test_delete_observation_only_touches_owner(manager):
    manager.create_entities(
        [
            {"name": "A", "entityType": "x", "observations": ["shared"]},
            {"name": "B", "entityType": "x", "observations": ["shared"]},
        ]
    )
    manager.delete_observations([{"entityName": "A", "observations": ["shared"]}])

    graph = manager.read_graph()
    assert {e.name: e.observations for e in graph.entities} == {"A": [], "B": ["shared"]}


def test_delete_missing_observation_is_noop(seeded):
    before = seeded.read_graph()
    seeded.delete_observations(
        [
            {"entityName": "John_Smith", "observations": ["never said"]},
            {"entityName": "Ghost", "observations": ["x"]},
        ]
    )
    assert seeded.read_graph() == before


def test_deleted_observation_drops_its_tags(seeded):
    seeded.tag_observation("Jane_Doe", "Likes chess", ["hobby"])
    seeded.delete_observations([{"entityName": "Jane_Doe", "observations": ["Likes chess"]}])

    usage = {u.tag: u for u in seeded.get_tag_usage()}
    assert usage["hobby"].observation_count == 0
