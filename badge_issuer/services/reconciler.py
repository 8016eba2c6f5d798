"""Rebuild the badge catalog from a tree listing and the commit log.

The repository is the only record of what has been issued.  Its layout
says which issuer, classes and badges exist; its commit messages say in
which order the classes were created:

    /issuer.json, /img.png, /award.html        the issuer
    /<Class>/class.json, /<Class>/img.png       one class
    /<Class>/<uid>.json                         one badge of that class

``reconcile`` is a pure function of its two inputs.  A layout that
contradicts itself is returned as a StructuralError value; it is never
raised.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable

from badge_issuer.models.catalog import (
    Catalog,
    CatalogClass,
    CommitRecord,
    Directory,
    StructuralError,
    TreeEntry,
)

logger = logging.getLogger(__name__)

ISSUER_FILE = "issuer.json"
ISSUER_IMAGE = "img.png"
AWARD_FILE = "award.html"
CLASS_FILE = "class.json"
CLASS_IMAGE = "img.png"

CLASS_COMMIT_PREFIX = "Add metadata for class "


def has_issuer(entries: Iterable[TreeEntry]) -> bool:
    root_files = {e.name for e in entries if not isinstance(e, Directory)}
    return {ISSUER_FILE, ISSUER_IMAGE, AWARD_FILE} <= root_files


def class_name_from_commit(message: str) -> str | None:
    """Extract ``<name>`` from ``Add metadata for class '<name>'``."""
    if CLASS_COMMIT_PREFIX not in message:
        return None
    first, last = message.find("'"), message.rfind("'")
    if first == -1 or last <= first:
        return None
    return message[first + 1 : last]


def discover_classes(
    entries: Iterable[TreeEntry], issuer_present: bool
) -> list[CatalogClass] | StructuralError:
    classes: list[CatalogClass] = []
    for entry in entries:
        if not isinstance(entry, Directory):
            continue
        if not issuer_present:
            return StructuralError("Invalid declaration of the issuer")
        if CLASS_FILE not in entry.children or CLASS_IMAGE not in entry.children:
            return StructuralError(f"Invalid declaration of class '{entry.name}'")

        badges = tuple(
            posixpath.splitext(child)[0]
            for child in entry.children
            if child not in (CLASS_FILE, CLASS_IMAGE)
        )
        classes.append(CatalogClass(name=entry.name, badges=badges))
    return classes


def order_classes(
    classes: list[CatalogClass], history: Iterable[CommitRecord]
) -> list[CatalogClass]:
    """Order classes by first matching class commit in ``history`` scan order.

    Classes with no matching commit (e.g. created before the fetched
    history window) go last, in tree order.
    """
    by_name = {c.name: c for c in classes}
    ordered: list[CatalogClass] = []
    seen: set[str] = set()

    for record in history:
        name = class_name_from_commit(record.message)
        if name is None or name in seen or name not in by_name:
            continue
        seen.add(name)
        ordered.append(by_name[name])

    unmatched = [c for c in classes if c.name not in seen]
    if unmatched:
        logger.warning(
            "No creation commit found for classes %s; appending unordered",
            [c.name for c in unmatched],
        )
    return ordered + unmatched


def reconcile(
    entries: Iterable[TreeEntry], history: Iterable[CommitRecord]
) -> Catalog | StructuralError:
    entries = list(entries)
    issuer_present = has_issuer(entries)

    discovered = discover_classes(entries, issuer_present)
    if isinstance(discovered, StructuralError):
        logger.error("Structural inconsistency: %s", discovered.reason)
        return discovered

    return Catalog(
        has_issuer=issuer_present,
        classes=tuple(order_classes(discovered, history)),
    )
