"""Open Badges (hosted verification) documents written to the store."""

from __future__ import annotations

import json
from dataclasses import dataclass


def _dump(document: dict) -> str:
    return json.dumps(document, indent=2)


@dataclass(frozen=True, slots=True)
class Issuer:
    """Issuer organization — the single ``issuer.json`` at the repo root."""

    name: str
    url: str
    description: str
    image: str
    email: str

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "image": self.image,
            "email": self.email,
        }

    def to_json(self) -> str:
        return _dump(self.to_document())


@dataclass(frozen=True, slots=True)
class BadgeClass:
    """Credential class — ``<segment>/class.json``."""

    name: str
    description: str
    image: str
    criteria: str
    issuer: str

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "criteria": self.criteria,
            "issuer": self.issuer,
        }

    def to_json(self) -> str:
        return _dump(self.to_document())


@dataclass(frozen=True, slots=True)
class Recipient:
    identity: str
    type: str = "email"
    hashed: bool = False

    def to_document(self) -> dict:
        return {"type": self.type, "hashed": self.hashed, "identity": self.identity}


@dataclass(frozen=True, slots=True)
class Verification:
    url: str
    type: str = "hosted"

    def to_document(self) -> dict:
        return {"type": self.type, "url": self.url}


@dataclass(frozen=True, slots=True)
class BadgeAssertion:
    """One awarded badge — ``<segment>/<uid>.json``."""

    uid: str
    recipient: Recipient
    badge: str
    issued_on: int  # epoch seconds
    verify: Verification

    def to_document(self) -> dict:
        return {
            "uid": self.uid,
            "recipient": self.recipient.to_document(),
            "badge": self.badge,
            "issuedOn": self.issued_on,
            "verify": self.verify.to_document(),
        }

    def to_json(self) -> str:
        return _dump(self.to_document())
