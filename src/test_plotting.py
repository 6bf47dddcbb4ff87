from datetime import date

from models import Gender
from plotting import build_dot, card_label
from store import FamilyTreeStore


def make_store():
    store = FamilyTreeStore()
    alex = store.create_root("Alex", Gender.MALE, date(1988, 4, 2))
    emma = store.add_spouse(alex, "Emma")
    store.add_child(alex, "Leo", Gender.MALE)
    return store, alex, emma


def test_card_label():
    store, alex, emma = make_store()

    assert card_label(store.get(alex)) == "Alex\nFather\n1988"
    assert card_label(store.get(emma)) == "Emma\nMother"


def test_build_dot_pins_every_card():
    store, alex, emma = make_store()

    P = build_dot(store)

    nodes = [n for n in P.get_nodes() if n.get_name() not in ("node", "edge", "graph")]
    assert len(nodes) == 3
    for node in nodes:
        assert str(node.get("pos")).strip('"').endswith("!")
    assert P.get_node(str(emma))[0].get("fillcolor") == "lightpink"


def test_build_dot_edges():
    store, alex, emma = make_store()

    P = build_dot(store)

    edges = P.get_edges()
    # Two parent edges to Leo plus one undirected spouse edge
    assert len(edges) == 3
    spouse_edges = [e for e in edges if e.get("dir") == "none"]
    assert len(spouse_edges) == 1
