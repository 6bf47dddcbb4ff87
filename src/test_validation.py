import pytest

from models import Gender
from store import FamilyTreeStore
from validation import validate_store

F = Gender.FEMALE
M = Gender.MALE


@pytest.fixture
def store():
    store = FamilyTreeStore()
    a = store.create_root("A", F)
    store.add_spouse(a, "B")
    store.add_child(a, "C", M)
    return store


def test_healthy_store_has_no_warnings(store):
    assert validate_store(store) == []
    assert validate_store(FamilyTreeStore()) == []


# The tests below corrupt nodes directly, bypassing the store's operations


def test_one_directional_parent_link(store):
    store.get(3).parents.discard(1)

    warnings = validate_store(store)

    assert any("does not list it as a parent" in w for w in warnings)


def test_dangling_ids(store):
    store.get(3).parents.add(99)
    store.get(1).children.add(98)

    warnings = validate_store(store)

    assert any("Dangling parent #99" in w for w in warnings)
    assert any("Dangling child #98" in w for w in warnings)


def test_same_gender_parents(store):
    d = store.add_standalone("D", F)
    c = store.get(3)
    c.parents.discard(2)
    store.get(2).children.discard(3)
    c.parents.add(d)
    store.get(d).children.add(3)

    assert any("two female parents" in w for w in validate_store(store))


def test_spouse_rules(store):
    store.get(2).spouse = None

    assert any("not mutual" in w for w in validate_store(store))


def test_shared_slot(store):
    a, b = store.get(1), store.get(2)
    b.slot = a.slot

    assert any("is shared by" in w for w in validate_store(store))


def test_parent_child_cycle(store):
    store.get(3).children.add(1)
    store.get(1).parents.add(3)

    assert any("Cycle detected" in w for w in validate_store(store))
