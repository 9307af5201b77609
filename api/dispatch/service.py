"""
Operation dispatch.

Resolves an operation name against the registry, validates its arguments,
runs the handler and turns the outcome into a JSON-ready result. In a batch
every operation is resolved on its own: one failure never cancels its
siblings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pydantic
from fastapi.encoders import jsonable_encoder

from core.errors import ServiceError, ValidationError
from core.registry import Entry, Registry

from .schemas import OperationCall

logger = logging.getLogger(__name__)


def _format_validation_error(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid arguments."


def parse_arguments(entry: Entry, arguments: dict[str, Any] | None) -> Any:
    """
    Validate raw arguments against the entry's model. Raises ValidationError.
    """
    try:
        return entry.arguments.model_validate(arguments or {})
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid arguments for {entry.name}: {_format_validation_error(exc)}") from exc


async def run(registry: Registry, name: str, arguments: dict[str, Any] | None = None) -> Any:
    """
    Run one operation and return its JSON-ready result. Errors propagate.
    """
    entry = registry.lookup(name)
    args = parse_arguments(entry, arguments)
    result = await entry.handler(args)
    return jsonable_encoder(result)


async def execute(registry: Registry, call: OperationCall) -> dict[str, Any]:
    """
    Run one operation and capture its outcome as a result dict.
    """
    outcome: dict[str, Any] = {"name": call.name, "alias": call.alias}
    try:
        data = await run(registry, call.name, call.arguments)
    except ServiceError as exc:
        logger.warning("operation_failed name=%s kind=%s message=%s", call.name, exc.kind, exc.message)
        outcome.update(ok=False, error=exc.to_dict())
        return outcome
    except Exception:
        logger.exception("operation_crashed name=%s", call.name)
        outcome.update(ok=False, error={"kind": "internal", "message": "Internal error."})
        return outcome

    outcome.update(ok=True, data=data)
    return outcome


def _is_mutation(registry: Registry, name: str) -> bool:
    return name in registry and registry.lookup(name).is_mutation


async def execute_batch(registry: Registry, calls: list[OperationCall]) -> list[dict[str, Any]]:
    """
    Run a batch; results keep the order of `calls`.

    Mutations run one at a time in request order, so a later step sees the
    effect of an earlier one. Queries between two mutations run concurrently.
    """
    results: list[dict[str, Any]] = []
    pending: list[OperationCall] = []

    async def flush() -> None:
        if pending:
            results.extend(await asyncio.gather(*(execute(registry, call) for call in pending)))
            pending.clear()

    for call in calls:
        if _is_mutation(registry, call.name):
            await flush()
            results.append(await execute(registry, call))
        else:
            pending.append(call)
    await flush()
    return results
