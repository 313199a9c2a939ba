from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


Role = Literal["display", "controller"]
ROLES: tuple[str, ...] = ("display", "controller")

AnnotationType = Literal["danger", "arrow", "incident", "restricted"]
Severity = Literal["low", "medium", "high"]
SEVERITIES: tuple[str, ...] = ("low", "medium", "high")

# Points are relayed as the clients send them: {"x", "y", "z"} or {"x", "z"}.
Point = dict[str, Any]


@dataclass(frozen=True)
class Annotation:
    id: str
    created_at: str

    # Fixed per subclass.
    type: AnnotationType = field(init=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "createdAt": self.created_at}


@dataclass(frozen=True)
class DangerZone(Annotation):
    type: AnnotationType = field(init=False, default="danger")
    position: Point | None = None
    radius: float = 5
    label: str = "Danger Zone"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(position=self.position, radius=self.radius, label=self.label)
        return d


@dataclass(frozen=True)
class Arrow(Annotation):
    type: AnnotationType = field(init=False, default="arrow")
    start: Point | None = None
    end: Point | None = None
    label: str = "Direction"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(start=self.start, end=self.end, label=self.label)
        return d


@dataclass(frozen=True)
class Incident(Annotation):
    type: AnnotationType = field(init=False, default="incident")
    position: Point | None = None
    date: str = ""
    description: str = "Incident reported"
    severity: Severity = "medium"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(
            position=self.position,
            date=self.date,
            description=self.description,
            severity=self.severity,
        )
        return d


@dataclass(frozen=True)
class RestrictedZone(Annotation):
    type: AnnotationType = field(init=False, default="restricted")
    vertices: tuple[Point, ...] = ()
    active: Any = True

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(vertices=list(self.vertices), active=self.active)
        return d


ANNOTATION_CLASSES: dict[str, type[Annotation]] = {
    "danger": DangerZone,
    "arrow": Arrow,
    "incident": Incident,
    "restricted": RestrictedZone,
}


def annotation_from_dict(data: dict) -> Annotation:
    """Rebuild an annotation from its serialized (camelCase) form."""
    if not isinstance(data, dict):
        raise ValueError(f"annotation must be an object, got {type(data).__name__}")
    kind = data.get("type")
    cls = ANNOTATION_CLASSES.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"unknown annotation type: {kind!r}")

    common = {"id": str(data["id"]), "created_at": str(data.get("createdAt", ""))}
    if cls is DangerZone:
        return DangerZone(
            **common,
            position=data.get("position"),
            radius=data.get("radius", 5),
            label=data.get("label", "Danger Zone"),
        )
    if cls is Arrow:
        return Arrow(
            **common,
            start=data.get("start"),
            end=data.get("end"),
            label=data.get("label", "Direction"),
        )
    if cls is Incident:
        return Incident(
            **common,
            position=data.get("position"),
            date=data.get("date", ""),
            description=data.get("description", "Incident reported"),
            severity=data.get("severity", "medium"),
        )
    return RestrictedZone(
        **common,
        vertices=tuple(data.get("vertices") or ()),
        active=data.get("active", True),
    )


@dataclass
class Room:
    code: str
    created_at: str
    display_connection: str | None = None
    controller_connection: str | None = None
    annotations: list[Annotation] = field(default_factory=list)

    def slot(self, role: str) -> str | None:
        if role == "display":
            return self.display_connection
        if role == "controller":
            return self.controller_connection
        raise ValueError(f"unknown role: {role!r}")

    def set_slot(self, role: str, connection: str | None) -> None:
        if role == "display":
            self.display_connection = connection
        elif role == "controller":
            self.controller_connection = connection
        else:
            raise ValueError(f"unknown role: {role!r}")

    def annotation_dicts(self) -> list[dict]:
        return [a.to_dict() for a in self.annotations]

    def to_record(self) -> dict:
        # The code is carried by the file name.
        return {
            "displaySocket": self.display_connection,
            "controllerSocket": self.controller_connection,
            "annotations": self.annotation_dicts(),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, code: str, record: dict) -> "Room":
        if not isinstance(record, dict):
            raise ValueError(f"room record must be an object, got {type(record).__name__}")
        annotations = record.get("annotations", [])
        if not isinstance(annotations, list):
            raise ValueError("room record annotations must be a list")
        return cls(
            code=code,
            created_at=str(record.get("createdAt", "")),
            display_connection=record.get("displaySocket"),
            controller_connection=record.get("controllerSocket"),
            annotations=[annotation_from_dict(a) for a in annotations],
        )
