"""Data classes for family tree entities."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Gender(str, Enum):
    FEMALE = "female"
    MALE = "male"

    @property
    def opposite(self) -> "Gender":
        return Gender.MALE if self is Gender.FEMALE else Gender.FEMALE


@dataclass(frozen=True)
class Vector:
    """A 2-D pixel vector (manual drag offsets and layout positions)."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)


ZERO = Vector(0.0, 0.0)


@dataclass
class Person:
    id: int
    name: str
    gender: Gender
    level: int  # generation index, increases downward
    slot: float  # horizontal column within the level
    birthday: date | None = None
    manual_offset: Vector = ZERO
    parents: set[int] = field(default_factory=set)
    children: set[int] = field(default_factory=set)
    spouse: int | None = None


def kinship_label(person: Person) -> str:
    """Mother/Father for anyone with children, Daughter/Son otherwise."""
    if person.children:
        return "Mother" if person.gender is Gender.FEMALE else "Father"
    return "Daughter" if person.gender is Gender.FEMALE else "Son"
