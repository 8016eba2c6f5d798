from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Leaf:
    """A file in a tree listing."""

    name: str


@dataclass(frozen=True, slots=True)
class Directory:
    """A directory in a tree listing, with the names of the files inside it."""

    name: str
    children: tuple[str, ...] = ()


TreeEntry = Leaf | Directory


@dataclass(frozen=True, slots=True)
class CommitRecord:
    message: str
    sha: str | None = None


@dataclass(frozen=True, slots=True)
class CatalogClass:
    name: str
    badges: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"name": self.name, "badges": list(self.badges)}


@dataclass(frozen=True, slots=True)
class Catalog:
    """Snapshot of the repository taken once at initialization.

    Not updated by later issuance calls; the store stays the source of truth.
    """

    has_issuer: bool
    classes: tuple[CatalogClass, ...] = ()

    def class_names(self) -> list[str]:
        return [c.name for c in self.classes]

    def to_dict(self) -> dict:
        return {
            "has_issuer": self.has_issuer,
            "classes": [c.to_dict() for c in self.classes],
        }


@dataclass(frozen=True, slots=True)
class StructuralError:
    """The repository layout contradicts itself; no catalog can be built."""

    reason: str
