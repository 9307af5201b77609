"""
Operation API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from core.errors import RoutingError
from core.registry import Registry

from . import schemas, service

router = APIRouter()


def get_registry(request: Request) -> Registry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Service is starting up.")
    return registry


@router.get("/operations")
async def list_operations(registry: Registry = Depends(get_registry)) -> dict:
    return {"queries": registry.queries(), "mutations": registry.mutations()}


@router.post("/operations")
async def run_operations(
    request: schemas.BatchRequest,
    registry: Registry = Depends(get_registry),
) -> dict:
    """
    Run a batch of operations. Always 200; each result carries its own error.
    """
    results = await service.execute_batch(registry, request.operations)
    return {"results": results, "count": len(results)}


@router.post("/operations/{name}")
async def run_operation(
    name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    registry: Registry = Depends(get_registry),
) -> dict:
    """
    Run a single operation. Failures map to HTTP status codes.
    """
    data = await service.run(registry, name, arguments)
    return {"data": data}


@router.post("/{kind}/operations")
async def run_kind_operations(
    kind: str,
    request: schemas.BatchRequest,
    registry: Registry = Depends(get_registry),
) -> dict:
    """
    Run a batch against one resource kind's operations only.
    """
    try:
        scoped = registry.for_kind(kind)
    except RoutingError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    results = await service.execute_batch(scoped, request.operations)
    return {"kind": kind, "results": results, "count": len(results)}
