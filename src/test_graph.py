from datetime import date

import pytest

from graph import build_graph, descendants_of, is_descendant, lineage_graph
from models import Gender
from store import FamilyTreeStore

F = Gender.FEMALE
M = Gender.MALE


@pytest.fixture
def store():
    """Grandparents -> Alex + Emma -> Leo."""
    store = FamilyTreeStore()
    alex = store.create_root("Alex", M, date(1988, 4, 2))
    store.add_parent(alex, F, "Maria")
    store.add_parent(alex, M, "John")
    emma = store.add_spouse(alex, "Emma")
    store.add_child(emma, "Leo", M)
    return store


def ids_by_name(store):
    return {p.name: p.id for p in store}


def test_build_graph_nodes_and_edges(store):
    ids = ids_by_name(store)
    G = build_graph(store)

    assert G.number_of_nodes() == 5
    assert G.nodes[ids["Alex"]]["sex"] == "M"
    assert G.nodes[ids["Alex"]]["birth_date"] == "1988-04-02"
    assert G.nodes[ids["Emma"]]["birth_date"] is None
    assert G.edges[ids["Maria"], ids["Alex"]]["relationship_type"] == "PARENT_OF"

    spouse_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d["relationship_type"] == "SPOUSE_OF"
    ]
    assert spouse_edges == [(ids["Alex"], ids["Emma"])]


def test_descendants_of(store):
    ids = ids_by_name(store)

    assert descendants_of(store, ids["John"]) == {ids["Alex"], ids["Leo"]}
    assert descendants_of(store, ids["Leo"]) == set()
    assert descendants_of(store, 999) == set()


def test_lineage_graph_tracks_parent_child_edges_only(store):
    ids = ids_by_name(store)
    lineage = lineage_graph(store)

    assert set(lineage.nodes) == set(ids.values())
    assert lineage.has_edge(ids["Maria"], ids["Alex"])
    assert not lineage.has_edge(ids["Alex"], ids["Emma"])
    assert is_descendant(lineage, ids["Leo"], ids["John"])
    assert not is_descendant(lineage, ids["John"], ids["Leo"])
    assert not is_descendant(lineage, ids["Leo"], ids["Leo"])
    assert not is_descendant(lineage, 999, ids["John"])
