"""Issuer, class and badge creation against a RemoteStore.

Each create call builds its documents first, then writes them one at a
time in a fixed order; a write starts only after the previous one has
committed.  Nothing is rolled back: if the second write of
``create_issuer`` fails, ``award.html`` stays committed and the caller
has to inspect the repository before retrying.

Calls on one workflow are expected to be issued sequentially.  Two
concurrent create calls may interleave their commits.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path

from badge_issuer.core.metrics import (
    BADGES_ISSUED,
    CATALOG_CLASSES,
    STORE_WRITE_DURATION,
    STORE_WRITES,
)
from badge_issuer.models.badge import (
    BadgeAssertion,
    BadgeClass,
    Issuer,
    Recipient,
    Verification,
)
from badge_issuer.models.catalog import Catalog, StructuralError
from badge_issuer.repos.store import RemoteStore
from badge_issuer.services.award import AWARD_TEMPLATE, render_award, repo_pages_path
from badge_issuer.services.reconciler import (
    AWARD_FILE,
    CLASS_FILE,
    CLASS_IMAGE,
    ISSUER_FILE,
    ISSUER_IMAGE,
    reconcile,
)

logger = logging.getLogger(__name__)

UID_LENGTH = 20
_UID_ALPHABET = string.ascii_lowercase + string.digits
_SCHEME_RE = re.compile(r"^https?://")
_WHITESPACE_RE = re.compile(r"\s+")
_SEGMENT_RE = re.compile(r"^[^\s/\\]+$")


class BadgeIssuerError(Exception):
    pass


class ImagePreconditionError(BadgeIssuerError):
    """A local image could not be read; nothing was written."""


class InvalidClassSegmentError(BadgeIssuerError):
    """A badge was addressed to a name that cannot be a class directory."""


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    user: str
    repo: str
    storage: str  # public base URL of the published repository

    def __post_init__(self) -> None:
        object.__setattr__(self, "storage", self.storage.rstrip("/"))

    def storage_url(self, *parts: str) -> str:
        return "/".join((self.storage, *parts))


@dataclass(frozen=True, slots=True)
class IssuerInput:
    name: str
    url: str
    description: str
    image: str | Path | bytes
    email: str


@dataclass(frozen=True, slots=True)
class ClassInput:
    name: str
    description: str
    image: str | Path | bytes
    criteria: str


@dataclass(frozen=True, slots=True)
class BadgeInput:
    name: str  # class path segment
    email: str


def normalize_url(url: str) -> str:
    return url if _SCHEME_RE.match(url) else f"http://{url}"


def class_segment(name: str) -> str:
    """``"  Foo  Bar "`` -> ``"Foo_Bar"``."""
    return _WHITESPACE_RE.sub("_", name.strip())


def check_class_segment(segment: str) -> None:
    """Reject names that would put a badge outside a single class directory."""
    if not _SEGMENT_RE.match(segment) or segment in (".", ".."):
        raise InvalidClassSegmentError(f"invalid class name {segment!r}")


def generate_uid(length: int = UID_LENGTH) -> str:
    return "".join(secrets.choice(_UID_ALPHABET) for _ in range(length))


def _b64(payload: bytes | str) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return base64.b64encode(payload).decode("ascii")


def _read_image(image: str | Path | bytes) -> bytes:
    if isinstance(image, bytes):
        return image
    try:
        return Path(image).read_bytes()
    except OSError as e:
        raise ImagePreconditionError(f"cannot read image {str(image)!r}: {e}") from e


class BadgeWorkflow:
    """Handle returned by ``initialize``; owns its config and catalog snapshot."""

    def __init__(self, config: WorkflowConfig, catalog: Catalog, store: RemoteStore) -> None:
        self.config = config
        self.catalog = catalog
        self._store = store

    async def _commit(self, kind: str, path: str, message: str, payload: bytes | str) -> dict:
        started = time.perf_counter()
        result = await self._store.write_file(path, message, _b64(payload))
        STORE_WRITE_DURATION.labels(kind=kind).observe(time.perf_counter() - started)
        STORE_WRITES.labels(kind=kind).inc()
        logger.info(
            "Committed %s",
            path,
            extra={"repo": self.config.repo, "path": path, "commit_message": message},
        )
        return result

    async def create_issuer(self, data: IssuerInput) -> Issuer:
        image = _read_image(data.image)
        cfg = self.config

        issuer = Issuer(
            name=data.name,
            url=normalize_url(data.url),
            description=data.description,
            image=cfg.storage_url(ISSUER_IMAGE),
            email=data.email,
        )
        award_html = render_award(AWARD_TEMPLATE, repo_pages_path(cfg.user, cfg.repo))

        await self._commit(
            "award", AWARD_FILE, f"Add awarding html for an issuer '{data.name}'", award_html
        )
        await self._commit(
            "issuer", ISSUER_FILE, f"Add metadata for an issuer '{data.name}'", issuer.to_json()
        )
        await self._commit(
            "issuer_image", ISSUER_IMAGE, f"Add image for an issuer '{data.name}'", image
        )
        return issuer

    async def create_class(self, data: ClassInput) -> BadgeClass:
        segment = class_segment(data.name)
        check_class_segment(segment)
        image = _read_image(data.image)
        cfg = self.config

        badge_class = BadgeClass(
            name=data.name,
            description=data.description,
            image=cfg.storage_url(segment, CLASS_IMAGE),
            criteria=normalize_url(data.criteria),
            issuer=cfg.storage_url(ISSUER_FILE),
        )

        await self._commit(
            "class",
            f"{segment}/{CLASS_FILE}",
            f"Add metadata for class '{segment}'",
            badge_class.to_json(),
        )
        await self._commit(
            "class_image",
            f"{segment}/{CLASS_IMAGE}",
            f"Add image for class '{segment}'",
            image,
        )
        return badge_class

    async def create_badge(self, data: BadgeInput) -> BadgeAssertion:
        cfg = self.config
        segment = data.name
        check_class_segment(segment)
        uid = generate_uid()

        assertion = BadgeAssertion(
            uid=uid,
            recipient=Recipient(identity=data.email),
            badge=cfg.storage_url(segment, CLASS_FILE),
            issued_on=int(time.time()),
            verify=Verification(url=cfg.storage_url(segment, f"{uid}.json")),
        )

        await self._commit(
            "badge",
            f"{segment}/{uid}.json",
            f"Add badge '{uid}' in class '{segment}'",
            assertion.to_json(),
        )
        BADGES_ISSUED.labels(class_name=segment).inc()
        logger.info("Issued badge", extra={"class_name": segment, "uid": uid})
        return assertion


async def initialize(
    config: WorkflowConfig, store: RemoteStore, *, history_depth: int = 1
) -> BadgeWorkflow | StructuralError:
    """Reconcile the repository and return a ready workflow.

    Tree and history are fetched concurrently.  Store errors propagate.
    """
    entries, history = await asyncio.gather(
        store.read_tree(""),
        store.read_history(history_depth),
    )
    # History arrives newest first; classes are listed oldest first.
    result = reconcile(entries, reversed(history))
    if isinstance(result, StructuralError):
        return result

    CATALOG_CLASSES.set(len(result.classes))
    logger.info(
        "Catalog reconciled  issuer=%s classes=%s",
        result.has_issuer,
        result.class_names(),
        extra={"repo": config.repo},
    )
    return BadgeWorkflow(config, result, store)
