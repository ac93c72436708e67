"""Health and readiness endpoints.

  /health (liveness): "is the process alive?"  Always 200; the ``status``
      field says whether every store answered its ping (``ok``) or not
      (``degraded``), with per-store counts from ``stats()``.

  /ready (readiness): "can this instance take traffic?"  503 when any store
      ping fails, so a load balancer stops routing here without the
      orchestrator restarting the process.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from courseflow.api.dependencies import PlatformDep
from courseflow.core.errors import StoreUnavailable
from courseflow.services.platform import Platform

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _ping_all(platform: Platform) -> dict[str, bool]:
    stores = platform.stores.named()
    return {name: store.ping() for name, store in stores.items()}


@router.get("/health")
def health(platform: PlatformDep) -> dict:
    pings = _ping_all(platform)
    checks: dict[str, str] = {}
    stats: dict[str, dict[str, int]] = {}

    for name, store in platform.stores.named().items():
        if not pings[name]:
            checks[name] = "down"
            continue
        checks[name] = "ok"
        try:
            stats[name] = store.stats()
        except StoreUnavailable:
            checks[name] = "down"

    overall = "ok" if all(v == "ok" for v in checks.values()) else "degraded"
    if overall != "ok":
        logger.warning("Health degraded: %s", checks)

    return {
        "status": overall,
        "backend": platform.stores.backend,
        "checks": checks,
        "stats": stats,
    }


@router.get("/ready")
def ready(platform: PlatformDep) -> Response:
    if all(_ping_all(platform).values()):
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
