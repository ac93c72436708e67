"""Prometheus scrape endpoint.

Returns plain text in the Prometheus exposition format, e.g.

  courseflow_workflow_actions_total{entity="proposal",action="submit",outcome="ok"} 3.0
  http_requests_total{method="GET",endpoint="/v1/courses",status_code="200"} 12.0
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
