"""Metrics API router: in-process counters and latency histograms for admins."""

from typing import Annotated

from fastapi import APIRouter, Depends

from opsconsole.api.dependencies import get_metrics, require_min_role
from opsconsole.observability.metrics import MetricsCollector
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

router = APIRouter()


@router.get("/metrics")
async def export_metrics(
    principal: Annotated[Principal, Depends(require_min_role(Role.ADMIN, ResourceType.USERS))],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
):
    return metrics.export_metrics()
