"""Visualization functions for the family tree."""

from pathlib import Path

import pydot

from layout import DEFAULT_CONFIG, LayoutConfig, compute_layout, connector_groups, connector_segments
from models import Gender, Person, kinship_label
from store import FamilyTreeStore

# Graphviz works in points (72 per inch); layout positions are pixels
POINTS_PER_PIXEL = 0.75

FILL_COLORS = {Gender.FEMALE: "lightpink", Gender.MALE: "lightblue"}


def card_label(person: Person) -> str:
    birth_year = str(person.birthday.year) if person.birthday else ""
    return f"{person.name}\n{kinship_label(person)}\n{birth_year}".rstrip()


def build_dot(store: FamilyTreeStore, config: LayoutConfig = DEFAULT_CONFIG) -> pydot.Dot:
    """
    Build a pydot graph with every card pinned at its computed layout position.

    Render with `neato -n` so graphviz keeps the pinned positions instead of
    running its own layout.
    """
    positions = compute_layout(store, config)

    P = pydot.Dot(graph_type="digraph")
    P.set("splines", "ortho")  # Orthogonal edges for cleaner tree look
    P.set("outputorder", "edgesfirst")

    for person in store:
        p = positions[person.id]
        # Card center, with y flipped (graphviz y axis points up)
        cx = (p.x + config.card_width / 2) * POINTS_PER_PIXEL
        cy = -(p.y + config.card_height / 2) * POINTS_PER_PIXEL
        P.add_node(
            pydot.Node(
                str(person.id),
                label=card_label(person),
                shape="box",
                style="rounded,filled",
                fillcolor=FILL_COLORS[person.gender],
                fontsize="10",
                fixedsize="true",
                width=f"{config.card_width / 96:.3f}",
                height=f"{config.card_height / 96:.3f}",
                pos=f"{cx:.1f},{cy:.1f}!",
            )
        )

    for person in store:
        for child_id in sorted(person.children):
            P.add_edge(pydot.Edge(str(person.id), str(child_id), color="darkgray"))
        if person.spouse is not None and person.id < person.spouse:
            P.add_edge(
                pydot.Edge(str(person.id), str(person.spouse), dir="none", color="darkgray")
            )

    return P


def plot_tree(
    store: FamilyTreeStore, output_path: Path | None = None, config: LayoutConfig = DEFAULT_CONFIG
):
    """
    Plot the family tree at its computed layout positions.

    Args:
        store: The family tree to draw
        output_path: Path to save the output image (png/svg/pdf, rendered by graphviz).
            If None, displays an interactive matplotlib preview.
        config: Card size and spacing
    """
    if output_path:
        # Determine format from extension
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"

        build_dot(store, config).write(str(output_path), format=ext, prog=["neato", "-n"])
        print(f"Graph saved to {output_path}")
        return

    import matplotlib.pyplot as plt
    from matplotlib.patches import FancyBboxPatch

    positions = compute_layout(store, config)
    fig, ax = plt.subplots(figsize=(20, 16))

    for group in connector_groups(store, positions):
        for start, end in connector_segments(group, positions, config):
            ax.plot([start.x, end.x], [start.y, end.y], color="#B9C0CC", linewidth=1.2)

    for person in store:
        p = positions[person.id]
        ax.add_patch(
            FancyBboxPatch(
                (p.x, p.y),
                config.card_width,
                config.card_height,
                boxstyle="round,pad=0,rounding_size=12",
                facecolor=FILL_COLORS[person.gender],
                edgecolor="gray",
            )
        )
        ax.text(
            p.x + config.card_width / 2,
            p.y + config.card_height / 2,
            card_label(person),
            ha="center",
            va="center",
            fontsize=8,
        )

    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.invert_yaxis()  # Scene y grows downward
    ax.axis("off")
    plt.tight_layout()
    plt.show()
