"""Demo: issuer → class → badge against an in-memory store, then reconcile.

Run with:
    python scripts/demo_issuance.py
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from badge_issuer.repos.store import InMemoryStore
from badge_issuer.services.issuance import (
    BadgeInput,
    BadgeWorkflow,
    ClassInput,
    IssuerInput,
    WorkflowConfig,
    initialize,
)

CONFIG = WorkflowConfig(user="acme", repo="badges", storage="https://acme.github.io/badges")


async def main() -> None:
    store = InMemoryStore()

    with tempfile.TemporaryDirectory() as tmp:
        image = Path(tmp) / "img.png"
        image.write_bytes(b"\x89PNG\r\n\x1a\n")

        # ── Step 1: empty repository ────────────────────────────────────
        workflow = await initialize(CONFIG, store)
        assert isinstance(workflow, BadgeWorkflow)
        print(f"1. initialize            → {workflow.catalog.to_dict()}")

        # ── Step 2: issuer ─────────────────────────────────────────────
        issuer = await workflow.create_issuer(
            IssuerInput("Acme", "acme.org", "Makers", image, "badges@acme.org")
        )
        print(f"2. create_issuer         → url={issuer.url}")

        # ── Step 3: class ──────────────────────────────────────────────
        await workflow.create_class(
            ClassInput("Intro to  Python", "Finished the course", image, "acme.org/python")
        )
        print("3. create_class          → Intro_to_Python/")

        # ── Step 4: badge ──────────────────────────────────────────────
        badge = await workflow.create_badge(BadgeInput("Intro_to_Python", "ada@example.com"))
        print(f"4. create_badge          → {badge.verify.url}")

    # ── Step 5: a fresh reconcile sees everything ──────────────────────
    again = await initialize(CONFIG, store)
    assert isinstance(again, BadgeWorkflow)
    print(f"5. initialize            → {again.catalog.to_dict()}")
    print("\n".join(f"   commit: {m}" for m in store.commit_messages()))


if __name__ == "__main__":
    asyncio.run(main())
