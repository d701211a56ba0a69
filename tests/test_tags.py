import pytest

from memory_graph.errors import EntityNotFoundError
from memory_graph.knowledge_graph import Tag, TagUsage


def test_create_tags_skips_existing(manager):
    first = manager.create_tags(
        [{"name": "urgent", "category": "priority", "description": "Do it now"}, {"name": "misc"}]
    )
    second = manager.create_tags([{"name": "urgent", "category": "other"}])

    assert [t.name for t in first] == ["urgent", "misc"]
    assert second == []
    urgent = Tag(name="urgent", category="priority", description="Do it now")
    assert manager.get_all_tags()[1] == urgent


def test_missing_category_is_surfaced_as_absent(manager):
    manager.create_tags([{"name": "misc"}])
    tag = manager.get_all_tags()[0]

    assert tag.category is None
    assert tag.description is None
    assert tag.to_wire() == {"name": "misc"}


def test_get_all_tags_sorted_by_name(manager):
    manager.create_tags([{"name": n} for n in ["zeta", "alpha", "mid"]])
    assert [t.name for t in manager.get_all_tags()] == ["alpha", "mid", "zeta"]


def test_tag_entity_creates_tag_and_links(seeded):
    added = seeded.tag_entity("Jane_Doe", ["vip", "friend"])

    assert added == ["vip", "friend"]
    assert {"vip", "friend"} <= {t.name for t in seeded.get_all_tags()}
    assert seeded.open_nodes(["Jane_Doe"]).entities[0].tags == ["friend", "vip"]


def test_tag_entity_reports_only_new_links(seeded):
    assert seeded.tag_entity("John_Smith", ["vip", "speaker"]) == ["speaker"]
    assert seeded.tag_entity("John_Smith", ["vip", "speaker"]) == []


def test_tag_missing_entity_raises(seeded):
    with pytest.raises(EntityNotFoundError):
        seeded.tag_entity("Ghost", ["vip", "brand-new"])
    assert "brand-new" not in {t.name for t in seeded.get_all_tags()}


def test_vip_scenario(manager):
    manager.create_entities([{"name": "John_Smith", "entityType": "person"}])
    manager.tag_entity("John_Smith", ["vip"])

    assert Tag(name="vip") in manager.get_all_tags()
    assert manager.get_tag_usage() == [
        TagUsage(tag="vip", entity_count=1, observation_count=0)
    ]


def test_tag_observation(seeded):
    added = seeded.tag_observation("John_Smith", "Speaks fluent Spanish", ["language", "skill"])
    again = seeded.tag_observation("John_Smith", "Speaks fluent Spanish", ["language"])

    assert added == ["language", "skill"]
    assert again == []
    usage = {u.tag: u for u in seeded.get_tag_usage()}
    assert usage["language"].observation_count == 1
    assert usage["language"].entity_count == 0


def test_tag_missing_observation_is_silent(seeded):
    assert seeded.tag_observation("John_Smith", "never said", ["ghost-tag"]) == []
    assert seeded.tag_observation("Ghost", "x", ["ghost-tag"]) == []
    assert "ghost-tag" not in {t.name for t in seeded.get_all_tags()}


def test_remove_tags_from_entity(seeded):
    seeded.tag_entity("John_Smith", ["speaker"])
    removed = seeded.remove_tags_from_entity("John_Smith", ["vip", "never-linked", "company"])

    assert removed == ["vip"]
    assert seeded.open_nodes(["John_Smith"]).entities[0].tags == ["speaker"]
    # the tag itself survives
    assert "vip" in {t.name for t in seeded.get_all_tags()}


def test_remove_tags_from_missing_entity(seeded):
    assert seeded.remove_tags_from_entity("Ghost", ["vip"]) == []


def test_tag_usage_counts_and_order(seeded):
    seeded.tag_entity("Jane_Doe", ["vip"])
    seeded.tag_observation("Jane_Doe", "Likes chess", ["hobby"])
    seeded.tag_observation("John_Smith", "Speaks fluent Spanish", ["vip"])
    seeded.create_tags([{"name": "unused"}])

    usage = seeded.get_tag_usage()
    assert usage == [
        TagUsage(tag="vip", entity_count=2, observation_count=1),
        TagUsage(tag="company", entity_count=1, observation_count=0),
        TagUsage(tag="hobby", entity_count=0, observation_count=1),
        TagUsage(tag="unused", entity_count=0, observation_count=0),
    ]
    assert usage[0].to_wire() == {"tag": "vip", "entityCount": 2, "observationCount": 1}


def test_tag_usage_follows_entity_deletion(seeded):
    seeded.tag_observation("John_Smith", "Speaks fluent Spanish", ["language"])
    seeded.delete_entities(["John_Smith"])

    usage = {u.tag: u for u in seeded.get_tag_usage()}
    assert usage["vip"] == TagUsage(tag="vip", entity_count=0, observation_count=0)
    assert usage["language"].observation_count == 0
