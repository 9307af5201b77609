"""
Wiring of resource namespaces into the API surface.
"""

from __future__ import annotations

from accounts import repository as account_repository
from accounts import schemas as account_schemas
from core.db import Database
from core.generator import GenerationClient
from core.registry import Registry, resource_namespace
from core.store import ResourceStore
from poems import repository as poem_repository
from poems import schemas as poem_schemas
from poems import service as poem_service
from prompts import repository as prompt_repository
from prompts import schemas as prompt_schemas


def compose_registry(
    *,
    accounts: ResourceStore,
    prompts: ResourceStore,
    poems: ResourceStore,
    generator: GenerationClient,
) -> Registry:
    return Registry.compose(
        resource_namespace(
            accounts,
            create_schema=account_schemas.AccountCreate,
            update_schema=account_schemas.AccountUpdate,
        ),
        resource_namespace(
            prompts,
            create_schema=prompt_schemas.PromptCreate,
            update_schema=prompt_schemas.PromptUpdate,
        ),
        resource_namespace(
            poems,
            create_schema=poem_schemas.PoemCreate,
            update_schema=poem_schemas.PoemUpdate,
        ).extend(poem_service.generation_entry(prompts=prompts, poems=poems, client=generator)),
    )


def build_registry(*, db: Database, generator: GenerationClient) -> Registry:
    return compose_registry(
        accounts=account_repository.build_store(db),
        prompts=prompt_repository.build_store(db),
        poems=poem_repository.build_store(db),
        generator=generator,
    )
