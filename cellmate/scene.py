"""Molecular structure variants and the geometry each one renders."""

from __future__ import annotations as _annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

Vec3 = Tuple[float, float, float]


class Variant(str, Enum):
    DNA = "DNA"
    PROTEIN = "Protein"
    CELL = "Cell"

    @classmethod
    def parse(cls, value: Union["Variant", str, None]) -> "Variant":
        """Resolve a variant name, falling back to DNA for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.DNA


class Shape(str, Enum):
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    PLANE = "plane"


@dataclass(frozen=True)
class Primitive:
    shape: Shape
    position: Vec3
    size: Tuple[float, ...]
    color: str
    label: Optional[str] = None
    opacity: float = 1.0
    spins: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape.value,
            "position": list(self.position),
            "size": list(self.size),
            "color": self.color,
            "label": self.label,
            "opacity": self.opacity,
            "spins": self.spins,
        }


@dataclass(frozen=True)
class Motion:
    """Angular velocities (rad/s) driving a scene from elapsed time alone.

    ``wobble`` is the amplitude and ``wobble_rate`` the frequency of an
    oscillation about x; ``spin`` turns each spinning primitive about its
    own y axis.
    """

    group_y: float = 0.0
    wobble: float = 0.0
    wobble_rate: float = 0.0
    spin: float = 0.0

    def group_rotation(self, elapsed: float) -> Vec3:
        x = math.sin(elapsed * self.wobble_rate) * self.wobble if self.wobble else 0.0
        return (x, elapsed * self.group_y, 0.0)

    def primitive_rotation(self, elapsed: float) -> Vec3:
        return (0.0, elapsed * self.spin, 0.0)


@dataclass(frozen=True)
class SceneDescription:
    variant: Variant
    description: str
    primitives: Tuple[Primitive, ...]
    backbone: Tuple[Primitive, ...] = ()
    motion: Motion = field(default_factory=Motion)

    @property
    def title(self) -> str:
        return f"{self.variant.value} Structure"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.variant.value,
            "title": self.title,
            "description": self.description,
            "primitives": [p.to_dict() for p in self.primitives],
            "backbone": [p.to_dict() for p in self.backbone],
        }


DESCRIPTIONS: Dict[Variant, str] = {
    Variant.DNA: "Double helix structure showing base pairs",
    Variant.PROTEIN: "Amino acid chains and folding patterns",
    Variant.CELL: "Basic cellular components and organelles",
}

DNA_BASES = (
    ((2.0, 2.0, 0.0), "#ff6b6b", "A"),
    ((-2.0, 2.0, 0.0), "#4ecdc4", "T"),
    ((1.5, 1.0, 1.0), "#45b7d1", "G"),
    ((-1.5, 1.0, 1.0), "#96ceb4", "C"),
    ((2.0, 0.0, 2.0), "#ffd93d", "A"),
    ((-2.0, 0.0, 2.0), "#ff9ff3", "T"),
)
BACKBONE_COLOR = "#8b5cf6"


def _dna() -> SceneDescription:
    primitives = []
    for (x, y, z), color, label in DNA_BASES:
        primitives.append(Primitive(Shape.SPHERE, (x, y, z), (0.3,), color, label=label, spins=True))
        primitives.append(Primitive(Shape.PLANE, (x, y + 0.6, z), (0.4, 0.2), "white"))

    # one connector between each pair of consecutive bases
    backbone = tuple(
        Primitive(Shape.CYLINDER, (0.0, y - 0.5, z + 0.5), (0.05, 1.0), BACKBONE_COLOR)
        for (_, y, z), _, _ in DNA_BASES[:-1]
    )
    return SceneDescription(
        variant=Variant.DNA,
        description=DESCRIPTIONS[Variant.DNA],
        primitives=tuple(primitives),
        backbone=backbone,
        motion=Motion(group_y=0.2, spin=0.5),
    )


def _protein() -> SceneDescription:
    residues = tuple(
        Primitive(
            Shape.SPHERE,
            (math.cos(i) * 2, i * 0.5 - 2, math.sin(i) * 2),
            (0.2,),
            f"hsl({i * 45}, 70%, 60%)",
        )
        for i in range(8)
    )
    return SceneDescription(
        variant=Variant.PROTEIN,
        description=DESCRIPTIONS[Variant.PROTEIN],
        primitives=residues,
        motion=Motion(group_y=0.1, wobble=0.2, wobble_rate=0.3),
    )


def _cell() -> SceneDescription:
    membrane = Primitive(Shape.SPHERE, (0.0, 0.0, 0.0), (3.0,), "#88ccff", opacity=0.3)
    nucleus = Primitive(Shape.SPHERE, (0.0, 0.0, 0.0), (1.0,), "#ff8888")
    organelles = tuple(
        Primitive(
            Shape.SPHERE,
            (math.cos(i) * 2, math.sin(i) * 2, math.cos(i * 2)),
            (0.3,),
            "#88ff88",
        )
        for i in range(6)
    )
    return SceneDescription(
        variant=Variant.CELL,
        description=DESCRIPTIONS[Variant.CELL],
        primitives=(membrane, nucleus) + organelles,
        motion=Motion(group_y=0.05),
    )


def build(variant: Union[Variant, str, None]) -> SceneDescription:
    """Build the scene for a variant; unknown names get the DNA scene."""
    match Variant.parse(variant):
        case Variant.PROTEIN:
            return _protein()
        case Variant.CELL:
            return _cell()
        case _:
            return _dna()


class SceneRegistry:
    """Holds the active variant and its scene. Starts on DNA."""

    def __init__(self, variant: Union[Variant, str, None] = Variant.DNA):
        self.variant = Variant.parse(variant)
        self.scene = build(self.variant)

    @property
    def variants(self) -> Tuple[Variant, ...]:
        return tuple(Variant)

    def select(self, variant: Union[Variant, str, None]) -> SceneDescription:
        self.variant = Variant.parse(variant)
        self.scene = build(self.variant)
        return self.scene
