"""Grid-to-screen layout and connector geometry for the family tree canvas."""

from dataclasses import dataclass, field

from models import Vector
from store import FamilyTreeStore

# Couple bar sits this fraction of the way from the parents down to the bus
COUPLE_BAR_RATIO = 0.35


@dataclass(frozen=True)
class LayoutConfig:
    card_width: float = 170.0
    card_height: float = 72.0
    h_gap: float = 40.0
    v_gap: float = 70.0
    padding: float = 400.0

    @property
    def x_step(self) -> float:
        return self.card_width + self.h_gap

    @property
    def y_step(self) -> float:
        return self.card_height + self.v_gap


DEFAULT_CONFIG = LayoutConfig()


@dataclass(frozen=True)
class Bounds:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Vector:
        return Vector((self.left + self.right) / 2, (self.top + self.bottom) / 2)


@dataclass
class ConnectorGroup:
    parent_ids: tuple[int, ...]
    child_ids: list[int] = field(default_factory=list)

    @property
    def is_couple(self) -> bool:
        return len(self.parent_ids) >= 2


def compute_layout(store: FamilyTreeStore, config: LayoutConfig = DEFAULT_CONFIG) -> dict[int, Vector]:
    """
    Map every node to the top-left corner of its card in scene coordinates.

    Base position comes from (slot, level), plus the node's manual drag offset.
    Everything is then translated so the smallest x and y are at least
    `config.padding`; no position is ever negative.
    """
    if not store:
        return {}

    pos = {
        p.id: Vector(p.slot * config.x_step, p.level * config.y_step) + p.manual_offset
        for p in store
    }

    min_x = min(p.x for p in pos.values())
    min_y = min(p.y for p in pos.values())
    shift = Vector(
        config.padding - min_x if min_x < config.padding else 0.0,
        config.padding - min_y if min_y < config.padding else 0.0,
    )
    if shift.x or shift.y:
        pos = {pid: p + shift for pid, p in pos.items()}

    return pos


def compute_bounds(
    positions: dict[int, Vector], config: LayoutConfig = DEFAULT_CONFIG, margin: float = 300.0
) -> Bounds:
    """Card-inclusive bounding box of a layout, grown by `margin` on each side."""
    if not positions:
        return Bounds(0.0, 0.0, 800.0, 600.0)

    return Bounds(
        left=min(p.x for p in positions.values()) - margin,
        top=min(p.y for p in positions.values()) - margin,
        right=max(p.x + config.card_width for p in positions.values()) + margin,
        bottom=max(p.y + config.card_height for p in positions.values()) + margin,
    )


def fit_to_screen(
    bounds: Bounds, screen_width: float, screen_height: float, fill: float = 0.8
) -> tuple[float, Vector]:
    """
    Scale and translation that centre `bounds` on a screen.

    A scene point p maps to screen point p * scale + translation.
    """
    scale = min(screen_width / bounds.width, screen_height / bounds.height) * fill
    center = bounds.center
    translation = Vector(screen_width / 2 - center.x * scale, screen_height / 2 - center.y * scale)
    return scale, translation


def connector_groups(store: FamilyTreeStore, positions: dict[int, Vector]) -> list[ConnectorGroup]:
    """Group children by their parent set, so a couple shares one connector."""
    groups: dict[tuple[int, ...], ConnectorGroup] = {}

    for child in store:
        if not child.parents or child.id not in positions:
            continue
        parent_ids = tuple(sorted(child.parents)[:2])
        if not all(pid in positions for pid in parent_ids):
            continue
        groups.setdefault(parent_ids, ConnectorGroup(parent_ids)).child_ids.append(child.id)

    return list(groups.values())


def _top_center(p: Vector, config: LayoutConfig) -> Vector:
    return Vector(p.x + config.card_width / 2, p.y)


def _bottom_center(p: Vector, config: LayoutConfig) -> Vector:
    return Vector(p.x + config.card_width / 2, p.y + config.card_height)


def connector_segments(
    group: ConnectorGroup, positions: dict[int, Vector], config: LayoutConfig = DEFAULT_CONFIG
) -> list[tuple[Vector, Vector]]:
    """Orthogonal line segments joining a group's parents to its children."""
    child_tops = [_top_center(positions[c], config) for c in group.child_ids]
    parent_bottoms = [_bottom_center(positions[p], config) for p in group.parent_ids]
    if not child_tops or not parent_bottoms:
        return []

    segments: list[tuple[Vector, Vector]] = []
    bus_y = (max(p.y for p in parent_bottoms) + min(c.y for c in child_tops)) / 2

    if group.is_couple:
        p1, p2 = parent_bottoms[:2]
        couple_y = p1.y + (bus_y - p1.y) * COUPLE_BAR_RATIO
        anchor_x = (p1.x + p2.x) / 2
        segments += [
            (p1, Vector(p1.x, couple_y)),
            (p2, Vector(p2.x, couple_y)),
            (Vector(min(p1.x, p2.x), couple_y), Vector(max(p1.x, p2.x), couple_y)),
        ]
        drop_from = Vector(anchor_x, couple_y)
    else:
        anchor_x = parent_bottoms[0].x
        drop_from = parent_bottoms[0]

    # Single child: an elbow from the drop point straight into the child
    if len(child_tops) == 1:
        child_top = child_tops[0]
        mid_y = (drop_from.y + child_top.y) / 2
        segments += [
            (drop_from, Vector(anchor_x, mid_y)),
            (Vector(anchor_x, mid_y), Vector(child_top.x, mid_y)),
            (Vector(child_top.x, mid_y), child_top),
        ]
        return segments

    min_x = min(min(c.x for c in child_tops), anchor_x)
    max_x = max(max(c.x for c in child_tops), anchor_x)
    segments += [
        (drop_from, Vector(anchor_x, bus_y)),
        (Vector(min_x, bus_y), Vector(max_x, bus_y)),
    ]
    segments += [(Vector(c.x, bus_y), c) for c in child_tops]
    return segments
