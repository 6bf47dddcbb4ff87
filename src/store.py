"""In-memory family graph store: relationship edits plus slot stabilization."""

from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import date
from itertools import count
import logging
import math
from types import MappingProxyType

import networkx as nx

from graph import is_descendant, lineage_graph
from models import ZERO, Gender, Person, Vector
from parsing import parse_birthday

logger = logging.getLogger(__name__)

MIN_SLOT_GAP = 1.0
UNNAMED = "Unnamed"

Listener = Callable[[], None]


def _as_gender(value) -> Gender:
    """Coerce a gender argument; anything else is a caller bug."""
    if isinstance(value, Gender):
        return value
    try:
        return Gender(value)
    except ValueError:
        raise ValueError(f"Invalid gender: {value!r}") from None


def _as_vector(delta) -> Vector:
    if isinstance(delta, Vector):
        return delta
    try:
        dx, dy = delta
        return Vector(float(dx), float(dy))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid offset delta: {delta!r}") from None


def _clean_name(name: str | None) -> str:
    return (name or "").strip() or UNNAMED


class FamilyTreeStore:
    """
    Sole owner of person nodes and their parent/child/spouse edges.

    Every public mutation validates first and changes nothing on rejection
    (returning None or False). A successful structural mutation re-stabilizes
    the (level, slot) grid, then notifies subscribers synchronously.
    """

    def __init__(self):
        self._nodes: dict[int, Person] = {}
        self._ids = count(1)
        self._listeners: list[Listener] = []
        self.last_added_id: int | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Mapping[int, Person]:
        return MappingProxyType(self._nodes)

    def get(self, person_id: int) -> Person | None:
        return self._nodes.get(person_id)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Person]:
        return (self._nodes[i] for i in sorted(self._nodes))

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a no-argument listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Relationship queries
    # ------------------------------------------------------------------

    def parent_pair(self, person_id: int) -> tuple[int | None, int | None]:
        """Return (female_parent_id, male_parent_id) for a person."""
        female = male = None
        person = self._nodes.get(person_id)
        if person is None:
            return (None, None)

        for pid in sorted(person.parents):
            if self._nodes[pid].gender is Gender.FEMALE:
                female = pid if female is None else female
            else:
                male = pid if male is None else male
        return (female, male)

    def _parent_of_gender(self, person_id: int, gender: Gender) -> int | None:
        female, male = self.parent_pair(person_id)
        return female if gender is Gender.FEMALE else male

    def find_co_parent(self, from_id: int) -> int | None:
        """
        Resolve who new children of `from_id` are shared with.

        The spouse wins; otherwise the first other parent found on any existing
        child, scanning children in id order.
        """
        person = self._nodes.get(from_id)
        if person is None:
            return None
        if person.spouse is not None:
            return person.spouse

        for child_id in sorted(person.children):
            for pid in sorted(self._nodes[child_id].parents):
                if pid != from_id:
                    return pid
        return None

    def co_parents_via_children(self, person_id: int) -> set[int]:
        person = self._nodes.get(person_id)
        if person is None:
            return set()
        return {
            pid
            for child_id in person.children
            for pid in self._nodes[child_id].parents
            if pid != person_id
        }

    def has_co_parent_via_children(self, person_id: int, excluding: int | None = None) -> bool:
        """True if person shares a child with someone (other than `excluding`)."""
        return bool(self.co_parents_via_children(person_id) - {excluding})

    def _lineage(self) -> nx.DiGraph:
        """Parent -> child graph, built once per operation and kept in step with its links."""
        return lineage_graph(self._nodes.values())

    # ------------------------------------------------------------------
    # Low-level edge helpers (no validation, no notification)
    # ------------------------------------------------------------------

    def _create(self, name, gender: Gender, level: int, slot: float, birthday) -> Person:
        person = Person(
            id=next(self._ids),
            name=_clean_name(name),
            gender=gender,
            level=level,
            slot=float(slot),
            birthday=birthday,
        )
        self._nodes[person.id] = person
        self.last_added_id = person.id
        logger.debug("Created %s #%d at level %d slot %s", gender.value, person.id, level, slot)
        return person

    def _link_parent_child(self, parent_id: int, child_id: int, lineage: nx.DiGraph | None = None):
        self._nodes[parent_id].children.add(child_id)
        self._nodes[child_id].parents.add(parent_id)
        if lineage is not None:
            lineage.add_edge(parent_id, child_id)

    def _link_spouses(self, a_id: int, b_id: int):
        self._nodes[a_id].spouse = b_id
        self._nodes[b_id].spouse = a_id

    def _can_take_parent(self, child_id: int, parent_id: int) -> bool:
        child = self._nodes[child_id]
        if parent_id in child.parents or len(child.parents) >= 2:
            return False
        return self._parent_of_gender(child_id, self._nodes[parent_id].gender) is None

    def _backfill_children(self, parent_id: int, source_id: int, lineage: nx.DiGraph):
        """Attach parent_id to every child of source_id that still lacks that parent's gender."""
        for child_id in sorted(self._nodes[source_id].children):
            if child_id == parent_id or is_descendant(lineage, parent_id, child_id):
                continue
            if self._can_take_parent(child_id, parent_id):
                self._link_parent_child(parent_id, child_id, lineage)
                logger.debug("Backfilled #%d as parent of #%d", parent_id, child_id)

    def _slots_at_level(self, level: int, exclude: int | None = None) -> list[float]:
        return [p.slot for p in self._nodes.values() if p.level == level and p.id != exclude]

    def _nearest_free_slot(
        self, level: int, anchor: float, prefer_right: bool = True, exclude: int | None = None
    ) -> float:
        """Closest whole-unit step from anchor with no neighbour nearer than MIN_SLOT_GAP."""
        occupied = self._slots_at_level(level, exclude)
        side = 1 if prefer_right else -1
        for step in count(0):
            for candidate in (anchor + side * step, anchor - side * step):
                if all(abs(candidate - s) >= MIN_SLOT_GAP for s in occupied):
                    return candidate

    def _next_child_slot(self, parent_id: int, co_parent_id: int | None, exclude: int) -> float:
        """Right of the existing siblings, or under the parents for a first child."""
        parent = self._nodes[parent_id]
        siblings = [self._nodes[c].slot for c in parent.children if c != exclude]
        if siblings:
            return self._nearest_free_slot(parent.level + 1, max(siblings) + 1, exclude=exclude)
        return self._shared_child_slot(parent_id, co_parent_id, exclude)

    def _shared_child_slot(
        self, parent_id: int, co_parent_id: int | None, exclude: int | None = None
    ) -> float:
        """Free slot one level down, anchored between parent and co-parent."""
        parent = self._nodes[parent_id]
        level = parent.level + 1
        if co_parent_id is None:
            return self._nearest_free_slot(level, parent.slot, exclude=exclude)

        co_parent = self._nodes[co_parent_id]
        return self._nearest_free_slot(
            level,
            (parent.slot + co_parent.slot) / 2,
            prefer_right=parent.slot >= co_parent.slot,
            exclude=exclude,
        )

    def _reject(self, operation: str, reason: str, *args):
        logger.debug("%s rejected: " + reason, operation, *args)

    def _commit(self):
        self.stabilize_layout()
        self._notify()

    # ------------------------------------------------------------------
    # Add operations
    # ------------------------------------------------------------------

    def create_root(self, name: str, gender, birthday: str | date | None = None) -> int | None:
        """Create the first node at (0, 0); on a non-empty store, add a standalone node."""
        if self._nodes:
            return self.add_standalone(name, gender, birthday)

        gender = _as_gender(gender)
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("create_root", "unparseable birthday")
            return None

        person = self._create(name, gender, 0, 0.0, birthday)
        self._commit()
        return person.id

    def add_standalone(self, name: str, gender, birthday: str | date | None = None) -> int | None:
        """Start a disconnected branch at level 0, right of everything already there."""
        gender = _as_gender(gender)
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("add_standalone", "unparseable birthday")
            return None

        occupied = self._slots_at_level(0)
        slot = max(occupied) + 1 if occupied else 0.0
        person = self._create(name, gender, 0, slot, birthday)
        self._commit()
        return person.id

    def add_parent(
        self, person_id: int, gender, name: str, birthday: str | date | None = None
    ) -> int | None:
        gender = _as_gender(gender)
        person = self._nodes.get(person_id)
        if person is None:
            self._reject("add_parent", "unknown person #%s", person_id)
            return None
        if len(person.parents) >= 2:
            self._reject("add_parent", "#%d already has two parents", person_id)
            return None
        if self._parent_of_gender(person_id, gender) is not None:
            self._reject("add_parent", "#%d already has a %s parent", person_id, gender.value)
            return None
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("add_parent", "unparseable birthday")
            return None

        other_id = self._parent_of_gender(person_id, gender.opposite)
        if other_id is None:
            slot = person.slot
        elif gender is Gender.FEMALE:
            slot = min(self._nodes[other_id].slot, person.slot) - 1
        else:
            slot = max(self._nodes[other_id].slot, person.slot) + 1

        parent = self._create(name, gender, person.level - 1, slot, birthday)
        self._link_parent_child(parent.id, person_id)
        if other_id is not None:
            self._backfill_children(parent.id, other_id, self._lineage())

        self._commit()
        return parent.id

    def add_child(
        self, from_id: int, name: str, gender, birthday: str | date | None = None
    ) -> int | None:
        gender = _as_gender(gender)
        parent = self._nodes.get(from_id)
        if parent is None:
            self._reject("add_child", "unknown person #%s", from_id)
            return None
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("add_child", "unparseable birthday")
            return None

        co_parent_id = self.find_co_parent(from_id)
        slot = self._shared_child_slot(from_id, co_parent_id)

        child = self._create(name, gender, parent.level + 1, slot, birthday)
        self._link_parent_child(from_id, child.id)
        if co_parent_id is not None and self._can_take_parent(child.id, co_parent_id):
            self._link_parent_child(co_parent_id, child.id)

        self._commit()
        return child.id

    def add_spouse(self, person_id: int, name: str, birthday: str | date | None = None) -> int | None:
        person = self._nodes.get(person_id)
        if person is None:
            self._reject("add_spouse", "unknown person #%s", person_id)
            return None
        if person.spouse is not None:
            self._reject("add_spouse", "#%d already has a spouse", person_id)
            return None
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("add_spouse", "unparseable birthday")
            return None

        gender = person.gender.opposite
        # Conventional side: wife on the left, husband on the right
        is_male = gender is Gender.MALE
        slot = self._nearest_free_slot(
            person.level,
            person.slot + (1 if is_male else -1),
            prefer_right=is_male,
        )

        spouse = self._create(name, gender, person.level, slot, birthday)
        self._link_spouses(person_id, spouse.id)
        self._backfill_children(spouse.id, person_id, self._lineage())

        self._commit()
        return spouse.id

    # ------------------------------------------------------------------
    # Linking existing nodes (drag-to-connect)
    # ------------------------------------------------------------------

    def link_existing_parent(self, parent_id: int, child_id: int) -> bool:
        return self._adopt(parent_id, child_id, "link_existing_parent")

    def link_existing_child(self, parent_id: int, child_id: int) -> bool:
        return self._adopt(parent_id, child_id, "link_existing_child")

    def _adopt(self, parent_id: int, child_id: int, operation: str) -> bool:
        parent = self._nodes.get(parent_id)
        child = self._nodes.get(child_id)
        if parent is None or child is None:
            self._reject(operation, "unknown node #%s or #%s", parent_id, child_id)
            return False
        if parent_id == child_id:
            self._reject(operation, "cannot link #%d to itself", parent_id)
            return False
        if child_id in parent.children:
            self._reject(operation, "#%d is already a child of #%d", child_id, parent_id)
            return False
        if parent.spouse == child_id:
            self._reject(operation, "#%d and #%d are spouses", parent_id, child_id)
            return False
        if not self._can_take_parent(child_id, parent_id):
            self._reject(operation, "#%d has no free %s parent slot", child_id, parent.gender.value)
            return False
        lineage = self._lineage()
        if is_descendant(lineage, parent_id, child_id):
            self._reject(operation, "#%d descends from #%d", parent_id, child_id)
            return False

        # Resolve before linking so the adopted child's own parents are not picked up
        co_parent_id = self.find_co_parent(parent_id)

        self._link_parent_child(parent_id, child_id, lineage)
        if (
            co_parent_id is not None
            and co_parent_id not in (child_id, child.spouse)
            and self._can_take_parent(child_id, co_parent_id)
            and not is_descendant(lineage, co_parent_id, child_id)
        ):
            self._link_parent_child(co_parent_id, child_id)

        # Re-adopting a node anchors it back into the grid
        child.level = parent.level + 1
        child.slot = self._next_child_slot(parent_id, co_parent_id, exclude=child_id)
        child.manual_offset = ZERO

        self._commit()
        return True

    def link_existing_spouses(self, a_id: int, b_id: int) -> bool:
        a = self._nodes.get(a_id)
        b = self._nodes.get(b_id)
        operation = "link_existing_spouses"
        if a is None or b is None:
            self._reject(operation, "unknown node #%s or #%s", a_id, b_id)
            return False
        if a_id == b_id:
            self._reject(operation, "cannot marry #%d to itself", a_id)
            return False
        if a.spouse is not None or b.spouse is not None:
            self._reject(operation, "#%d or #%d already has a spouse", a_id, b_id)
            return False
        if a.gender is b.gender:
            self._reject(operation, "#%d and #%d have the same gender", a_id, b_id)
            return False
        if self.has_co_parent_via_children(a_id, excluding=b_id) or self.has_co_parent_via_children(
            b_id, excluding=a_id
        ):
            self._reject(operation, "#%d or #%d already co-parents with someone else", a_id, b_id)
            return False
        lineage = self._lineage()
        if is_descendant(lineage, a_id, b_id) or is_descendant(lineage, b_id, a_id):
            self._reject(operation, "#%d and #%d are in one line of descent", a_id, b_id)
            return False

        self._link_spouses(a_id, b_id)
        self._backfill_children(b_id, a_id, lineage)
        self._backfill_children(a_id, b_id, lineage)

        self._commit()
        return True

    # ------------------------------------------------------------------
    # Other mutations
    # ------------------------------------------------------------------

    def delete_node(self, person_id: int):
        """Remove a node and every reference to it; descendants are kept."""
        person = self._nodes.pop(person_id, None)
        if person is None:
            return

        for pid in person.parents:
            self._nodes[pid].children.discard(person_id)
        for cid in person.children:
            self._nodes[cid].parents.discard(person_id)
        if person.spouse is not None:
            self._nodes[person.spouse].spouse = None

        if self.last_added_id == person_id:
            self.last_added_id = max(self._nodes) if self._nodes else None

        logger.debug("Deleted #%d", person_id)
        self._commit()

    def rename(self, person_id: int, name: str):
        person = self._nodes.get(person_id)
        if person is None:
            return
        name = (name or "").strip()
        if name:
            person.name = name
        self._notify()

    def set_birthday(self, person_id: int, birthday: str | date | None) -> bool:
        person = self._nodes.get(person_id)
        if person is None:
            return False
        ok, birthday = self._coerce_birthday(birthday)
        if not ok:
            self._reject("set_birthday", "unparseable birthday for #%d", person_id)
            return False
        person.birthday = birthday
        self._notify()
        return True

    def apply_manual_offset(self, person_ids: int | Iterable[int], delta):
        """Nudge one node (or a dragged group) by a pixel delta."""
        delta = _as_vector(delta)
        ids = [person_ids] if isinstance(person_ids, int) else list(person_ids)
        moved = [self._nodes[i] for i in ids if i in self._nodes]
        if not moved:
            return
        for person in moved:
            person.manual_offset = person.manual_offset + delta
        self._notify()

    def clear_all(self):
        self._nodes.clear()
        self._ids = count(1)
        self.last_added_id = None
        self._notify()

    @staticmethod
    def _coerce_birthday(birthday) -> tuple[bool, date | None]:
        """(ok, value); ok is False for non-blank text that does not parse."""
        if birthday is None or isinstance(birthday, date):
            return True, birthday
        parsed = parse_birthday(birthday)
        return (parsed is not None or not birthday.strip()), parsed

    # ------------------------------------------------------------------
    # Stabilization
    # ------------------------------------------------------------------

    def stabilize_layout(self):
        """
        Re-derive a collision-free integer slot grid.

        1) Per level: sort by (slot, id), push right so neighbours sit at least
           MIN_SLOT_GAP apart, then pull tight from the right so the level is
           packed into consecutive integer columns (left-to-right order kept).
        2) Shift every slot so the topmost, lowest-id node sits at slot 0.
        """
        if not self._nodes:
            return

        by_level: dict[int, list[Person]] = defaultdict(list)
        for person in self._nodes.values():
            by_level[person.level].append(person)

        for people in by_level.values():
            people.sort(key=lambda p: (p.slot, p.id))
            for left, right in zip(people, people[1:]):
                if right.slot < left.slot + MIN_SLOT_GAP:
                    right.slot = left.slot + MIN_SLOT_GAP

            rightmost = float(math.floor(people[-1].slot + 0.5))
            for offset, person in enumerate(reversed(people)):
                person.slot = rightmost - offset * MIN_SLOT_GAP

        anchor = min(self._nodes.values(), key=lambda p: (p.level, p.id))
        shift = anchor.slot
        if shift:
            for person in self._nodes.values():
                person.slot -= shift
