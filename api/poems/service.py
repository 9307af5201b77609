"""
Poem generation.

Flow:
1) Resolve the prompt text (stored prompt by id, or inline content)
2) Ask the generation service for a draft (no DB connection held)
3) Optionally persist the draft as a poem

Steps 2 and 3 are separate functions so callers can generate without saving.
"""

from __future__ import annotations

import logging

from core.generator import GenerationClient, PoemDraft
from core.registry import Entry
from core.store import ResourceStore

from . import schemas

logger = logging.getLogger(__name__)


async def resolve_prompt_content(
    prompts: ResourceStore,
    request: schemas.GeneratePoemRequest,
) -> str:
    if request.prompt_id is not None:
        prompt = await prompts.get(request.prompt_id)
        return str(prompt.content)
    return request.content or ""


async def generate_draft(
    *,
    prompts: ResourceStore,
    client: GenerationClient,
    request: schemas.GeneratePoemRequest,
) -> PoemDraft:
    content = await resolve_prompt_content(prompts, request)
    return await client.generate(content, request.max_tokens, request.temperature)


async def persist_draft(poems: ResourceStore[schemas.Poem], draft: PoemDraft) -> schemas.Poem:
    poem = await poems.create({"content": draft.text, "is_funny": draft.is_funny})
    logger.info("poem_draft_saved id=%s", poem.id)
    return poem


async def generate_poem(
    *,
    prompts: ResourceStore,
    poems: ResourceStore[schemas.Poem],
    client: GenerationClient,
    request: schemas.GeneratePoemRequest,
) -> schemas.GeneratedPoem:
    draft = await generate_draft(prompts=prompts, client=client, request=request)
    poem = await persist_draft(poems, draft) if request.save else None
    return schemas.GeneratedPoem(
        draft=schemas.PoemDraftOut(text=draft.text, is_funny=draft.is_funny),
        poem=poem,
    )


def generation_entry(
    *,
    prompts: ResourceStore,
    poems: ResourceStore[schemas.Poem],
    client: GenerationClient,
) -> Entry:
    """
    The `generate_poem` mutation, bound to the given stores and client.
    """

    async def handler(request: schemas.GeneratePoemRequest) -> schemas.GeneratedPoem:
        return await generate_poem(prompts=prompts, poems=poems, client=client, request=request)

    return Entry(
        name="generate_poem",
        kind="poem",
        operation="generate",
        is_mutation=True,
        arguments=schemas.GeneratePoemRequest,
        handler=handler,
    )
