"""NetworkX graph building and operations."""

from collections.abc import Iterable

import networkx as nx

from models import Gender, Person


def build_graph(people: Iterable[Person]) -> nx.DiGraph:
    """Build a NetworkX directed graph from a collection of person nodes."""
    G = nx.DiGraph()
    people = list(people)

    # Add nodes (persons)
    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for p in people:
        G.add_node(
            p.id,
            person_name=p.name,
            sex="F" if p.gender is Gender.FEMALE else "M",
            birth_date=p.birthday.isoformat() if p.birthday else None,
            level=p.level,
            slot=p.slot,
        )

    # Add edges (relationships); one SPOUSE_OF edge per couple
    for p in people:
        for child_id in p.children:
            G.add_edge(p.id, child_id, relationship_type="PARENT_OF")
        if p.spouse is not None and p.id < p.spouse:
            G.add_edge(p.id, p.spouse, relationship_type="SPOUSE_OF")

    return G


def parent_child_graph(G: nx.DiGraph) -> nx.DiGraph:
    """Return a view of G restricted to PARENT_OF edges."""
    return nx.subgraph_view(
        G, filter_edge=lambda u, v: G.edges[u, v].get("relationship_type") == "PARENT_OF"
    )


def lineage_graph(people: Iterable[Person]) -> nx.DiGraph:
    """Plain parent -> child graph over every person (no attributes)."""
    G = nx.DiGraph()
    for p in people:
        G.add_node(p.id)
        G.add_edges_from((p.id, child_id) for child_id in p.children)
    return G


def is_descendant(lineage: nx.DiGraph, candidate_id: int, ancestor_id: int) -> bool:
    """True if candidate_id is reachable from ancestor_id in a lineage graph."""
    if candidate_id == ancestor_id or ancestor_id not in lineage or candidate_id not in lineage:
        return False
    return nx.has_path(lineage, ancestor_id, candidate_id)


def descendants_of(people: Iterable[Person], person_id: int) -> set[int]:
    """All ids reachable from person_id by following parent -> child edges."""
    G = lineage_graph(people)
    if person_id not in G:
        return set()
    return nx.descendants(G, person_id)
