"""
1) Seed a small three-generation family through the store's edit operations.
2) Link existing people the way drag-to-connect does.
3) Validate the graph's structural invariants.
4) Compute screen positions with the layout engine.
5) Plot the laid-out tree.
"""

from pathlib import Path

from layout import compute_bounds, compute_layout
from models import Gender, Vector
from plotting import plot_tree
from store import FamilyTreeStore
from validation import validate_store


def seed_family(store: FamilyTreeStore) -> dict[str, int]:
    """Build the demo family and return the ids by name."""
    ids: dict[str, int] = {}
    ids["Alex"] = store.create_root("Alex", Gender.MALE, "1988-04-02")
    ids["Maria"] = store.add_parent(ids["Alex"], Gender.FEMALE, "Maria", "12 MAR 1960")
    ids["John"] = store.add_parent(ids["Alex"], Gender.MALE, "John", "1958")
    ids["Sophie"] = store.add_child(ids["Maria"], "Sophie", Gender.FEMALE, "1991")
    ids["Emma"] = store.add_spouse(ids["Alex"], "Emma", "JUN 1989")
    ids["Leo"] = store.add_child(ids["Alex"], "Leo", Gender.MALE, "2015-09-30")
    ids["Mia"] = store.add_child(ids["Emma"], "Mia", Gender.FEMALE, "2018")

    # A separate branch, then connected by dragging
    ids["Sam"] = store.add_standalone("Sam", Gender.MALE, "1990")
    store.apply_manual_offset(ids["Sam"], Vector(120, -40))
    store.link_existing_spouses(ids["Sophie"], ids["Sam"])
    ids["Nora"] = store.add_child(ids["Sophie"], "Nora", Gender.FEMALE, "2020")
    return ids


def main():
    project_root = Path(__file__).parent.parent
    plot_path = project_root / "family_tree.png"

    store = FamilyTreeStore()
    changes = []
    store.subscribe(lambda: changes.append(len(store)))

    print("Seeding family...")
    ids = seed_family(store)
    print(f"  Created {len(store)} people ({len(changes)} change notifications)")

    print("Validating graph...")
    warnings = validate_store(store)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    print("Computing layout...")
    positions = compute_layout(store)
    for name, person_id in ids.items():
        person = store.get(person_id)
        p = positions[person_id]
        print(f"  {name:<7} level {person.level:>2} slot {person.slot:>4g} -> ({p.x:.0f}, {p.y:.0f})")
    bounds = compute_bounds(positions)
    print(f"  Canvas bounds {bounds.width:.0f} x {bounds.height:.0f}")

    print(f"Plotting tree to: {plot_path}")
    plot_tree(store, plot_path)

    print("Done!")


if __name__ == "__main__":
    main()
