"""Structural validation for the family tree graph."""

from collections import defaultdict

import networkx as nx

from graph import build_graph, parent_child_graph
from models import Gender
from store import FamilyTreeStore


def validate_store(store: FamilyTreeStore) -> list[str]:
    """
    Validate the family tree store for:
    - Dangling or one-directional relationship links
    - More than two parents, or two parents of the same gender
    - Spouse links that are not mutual or join two people of the same gender
    - Two people in the same slot of one generation
    - Cycles in parent-child relationships

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    nodes = store.nodes

    for person in store:
        for pid in person.parents:
            if pid not in nodes:
                warnings.append(f"Dangling parent #{pid} on {person.name} (#{person.id})")
            elif person.id not in nodes[pid].children:
                warnings.append(f"#{pid} is a parent of #{person.id} but does not list it as a child")

        for cid in person.children:
            if cid not in nodes:
                warnings.append(f"Dangling child #{cid} on {person.name} (#{person.id})")
            elif person.id not in nodes[cid].parents:
                warnings.append(f"#{cid} is a child of #{person.id} but does not list it as a parent")

        if len(person.parents) > 2:
            warnings.append(f"{person.name} (#{person.id}) has {len(person.parents)} parents")
        genders = [nodes[pid].gender for pid in person.parents if pid in nodes]
        for gender in Gender:
            if genders.count(gender) > 1:
                warnings.append(f"{person.name} (#{person.id}) has two {gender.value} parents")

        if person.spouse is not None:
            spouse = nodes.get(person.spouse)
            if spouse is None:
                warnings.append(f"Dangling spouse #{person.spouse} on {person.name} (#{person.id})")
            elif spouse.spouse != person.id:
                warnings.append(f"Spouse link #{person.id} -> #{spouse.id} is not mutual")
            elif spouse.gender is person.gender:
                warnings.append(f"Spouses #{person.id} and #{spouse.id} have the same gender")

    # Slot uniqueness per generation
    occupied: dict[tuple[int, float], list[int]] = defaultdict(list)
    for person in store:
        occupied[(person.level, person.slot)].append(person.id)
    for (level, slot), ids in occupied.items():
        if len(ids) > 1:
            warnings.append(f"Level {level} slot {slot:g} is shared by {ids}")

    # Check for cycles; only nodes present in the store are graphed
    G = build_graph(store)
    try:
        cycle = nx.find_cycle(parent_child_graph(G), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    return warnings
