import pytest

from layout import (
    DEFAULT_CONFIG,
    Bounds,
    LayoutConfig,
    compute_bounds,
    compute_layout,
    connector_groups,
    connector_segments,
    fit_to_screen,
)
from models import Gender, Vector
from store import FamilyTreeStore

F = Gender.FEMALE
M = Gender.MALE


@pytest.fixture
def family():
    """Couple with two children: (store, mother, father, [kids])."""
    store = FamilyTreeStore()
    mother = store.create_root("Maria", F)
    father = store.add_spouse(mother, "John")
    kids = [store.add_child(mother, "Ann", F), store.add_child(mother, "Ben", M)]
    return store, mother, father, kids


def test_empty_store_has_no_positions():
    assert compute_layout(FamilyTreeStore()) == {}


def test_single_node_is_padded():
    store = FamilyTreeStore()
    root = store.create_root("A", F)

    assert compute_layout(store) == {root: Vector(400, 400)}


def test_grid_spacing(family):
    store, mother, father, kids = family
    pos = compute_layout(store)

    assert pos[father].x - pos[mother].x == DEFAULT_CONFIG.x_step
    assert pos[kids[0]].y - pos[mother].y == DEFAULT_CONFIG.y_step
    assert min(p.x for p in pos.values()) == DEFAULT_CONFIG.padding
    assert min(p.y for p in pos.values()) == DEFAULT_CONFIG.padding


def test_manual_offset_is_added(family):
    store, mother, father, kids = family
    before = compute_layout(store)

    store.apply_manual_offset(kids[1], (15, 25))
    after = compute_layout(store)

    assert after[kids[1]] == before[kids[1]] + Vector(15, 25)
    assert after[mother] == before[mother]


def test_large_negative_offset_never_goes_negative(family):
    store, mother, father, kids = family
    store.apply_manual_offset(father, (-100000, -50000))

    pos = compute_layout(store, LayoutConfig(padding=0))

    assert all(p.x >= 0 and p.y >= 0 for p in pos.values())
    assert pos[father] == Vector(0, 0)


def test_layout_is_idempotent(family):
    store = family[0]
    store.apply_manual_offset(family[3][0], (-700, 12))

    assert compute_layout(store) == compute_layout(store)


def test_compute_bounds():
    config = LayoutConfig(card_width=100, card_height=50)
    positions = {1: Vector(0, 0), 2: Vector(200, 300)}

    bounds = compute_bounds(positions, config, margin=10)

    assert bounds == Bounds(-10, -10, 310, 360)
    assert compute_bounds({}) == Bounds(0, 0, 800, 600)


def test_fit_to_screen_centres_bounds():
    bounds = Bounds(0, 0, 1000, 500)

    scale, translation = fit_to_screen(bounds, 1000, 1000)

    assert scale == pytest.approx(0.8)
    assert translation.x == pytest.approx(100)
    assert translation.y == pytest.approx(300)


def test_couple_children_share_one_connector(family):
    store, mother, father, kids = family
    pos = compute_layout(store)

    groups = connector_groups(store, pos)

    assert len(groups) == 1
    assert groups[0].parent_ids == tuple(sorted((mother, father)))
    assert sorted(groups[0].child_ids) == sorted(kids)
    assert groups[0].is_couple


def test_connector_groups_skip_unpositioned(family):
    store, mother, father, kids = family
    pos = compute_layout(store)
    del pos[father]

    assert connector_groups(store, pos) == []


def test_single_parent_single_child_segments():
    store = FamilyTreeStore()
    parent = store.create_root("A", F)
    child = store.add_child(parent, "C", M)
    pos = compute_layout(store)
    [group] = connector_groups(store, pos)

    segments = connector_segments(group, pos)

    assert len(segments) == 3
    start, end = segments[0][0], segments[-1][1]
    assert start == Vector(pos[parent].x + 85, pos[parent].y + 72)
    assert end == Vector(pos[child].x + 85, pos[child].y)


def test_couple_with_children_segments(family):
    store, mother, father, kids = family
    pos = compute_layout(store)
    [group] = connector_groups(store, pos)

    segments = connector_segments(group, pos)

    # Two drops, couple bar, mid drop, bus, one riser per child
    assert len(segments) == 5 + len(kids)
    child_tops = {Vector(pos[k].x + 85, pos[k].y) for k in kids}
    assert {end for _, end in segments[-len(kids):]} == child_tops
    bus = segments[4]
    assert bus[0].y == bus[1].y
