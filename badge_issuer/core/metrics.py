"""Prometheus metrics for the issuance workflow.

All metrics live here; the store and issuance modules import the one
they need and record at the point of action.  Exposed by GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

STORE_WRITES = Counter(
    "store_writes_total",
    "Files committed to the remote store, by document kind",
    ["kind"],  # award, issuer, issuer_image, class, class_image, badge
)

STORE_WRITE_DURATION = Histogram(
    "store_write_duration_seconds",
    "Duration of a single commit-producing write",
    ["kind"],
    # GitHub content writes usually land between 300ms and 2s
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

BADGES_ISSUED = Counter(
    "badges_issued_total",
    "Badge assertions written, by class",
    ["class_name"],
)

CATALOG_CLASSES = Gauge(
    "catalog_classes",
    "Badge classes found when the catalog was last reconciled",
)
