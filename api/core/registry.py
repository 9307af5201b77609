"""
Operation registry.

Binds each resource kind's store methods to named query and mutation entry
points (`list_prompts`, `create_prompt`, ...) and composes the per-kind
namespaces into the single surface the dispatcher routes against. Built once
at startup; read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, create_model

from .errors import RoutingError
from .store import ResourceStore

Handler = Callable[[Any], Awaitable[Any]]


class Arguments(BaseModel):
    """
    Base for operation argument models. Unknown arguments are rejected.
    """

    model_config = ConfigDict(extra="forbid")


class NoArguments(Arguments):
    pass


@dataclass(frozen=True)
class Entry:
    name: str
    kind: str
    operation: str
    is_mutation: bool
    arguments: type[BaseModel]
    handler: Handler


@dataclass(frozen=True)
class Namespace:
    kind: str
    plural: str
    queries: tuple[Entry, ...]
    mutations: tuple[Entry, ...]

    def entries(self) -> tuple[Entry, ...]:
        return self.queries + self.mutations

    def extend(self, *entries: Entry) -> Namespace:
        queries = self.queries + tuple(e for e in entries if not e.is_mutation)
        mutations = self.mutations + tuple(e for e in entries if e.is_mutation)
        return Namespace(kind=self.kind, plural=self.plural, queries=queries, mutations=mutations)


def _model_prefix(kind: str) -> str:
    return "".join(part.capitalize() for part in kind.split("_"))


def resource_namespace(
    store: ResourceStore,
    *,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
) -> Namespace:
    """
    Build the seven lifecycle entry points for one store.
    """
    kind = store.kind
    prefix = _model_prefix(kind.name)

    id_args = create_model(f"{prefix}IdArguments", __base__=Arguments, id=(kind.id_type, ...))
    create_args = create_model(f"Create{prefix}Arguments", __base__=Arguments, data=(create_schema, ...))
    update_args = create_model(
        f"Update{prefix}Arguments",
        __base__=Arguments,
        id=(kind.id_type, ...),
        data=(update_schema, ...),
    )

    async def list_(_: NoArguments) -> Any:
        return await store.list()

    async def get(args: Any) -> Any:
        return await store.get(args.id)

    async def create(args: Any) -> Any:
        return await store.create(args.data)

    async def update(args: Any) -> Any:
        return await store.update(args.id, args.data)

    async def soft_delete(args: Any) -> Any:
        return await store.soft_delete(args.id)

    async def restore(args: Any) -> Any:
        return await store.restore(args.id)

    async def destroy(args: Any) -> Any:
        return await store.destroy(args.id)

    def entry(name: str, operation: str, arguments: type[Arguments], handler: Handler, *, mutation: bool) -> Entry:
        return Entry(
            name=name,
            kind=kind.name,
            operation=operation,
            is_mutation=mutation,
            arguments=arguments,
            handler=handler,
        )

    return Namespace(
        kind=kind.name,
        plural=kind.plural,
        queries=(
            entry(f"list_{kind.plural}", "list", NoArguments, list_, mutation=False),
            entry(f"get_{kind.name}", "get", id_args, get, mutation=False),
        ),
        mutations=(
            entry(f"create_{kind.name}", "create", create_args, create, mutation=True),
            entry(f"update_{kind.name}", "update", update_args, update, mutation=True),
            entry(f"delete_{kind.name}", "soft_delete", id_args, soft_delete, mutation=True),
            entry(f"restore_{kind.name}", "restore", id_args, restore, mutation=True),
            entry(f"destroy_{kind.name}", "destroy", id_args, destroy, mutation=True),
        ),
    )


class Registry:
    def __init__(self, namespaces: Iterable[Namespace]) -> None:
        entries: dict[str, Entry] = {}
        by_kind: dict[str, Namespace] = {}
        for namespace in namespaces:
            for key in {namespace.kind, namespace.plural}:
                if key in by_kind:
                    raise ValueError(f"Resource kind {key!r} is registered twice.")
                by_kind[key] = namespace
            for item in namespace.entries():
                if item.name in entries:
                    raise ValueError(f"Operation {item.name!r} is registered twice.")
                entries[item.name] = item

        self._entries = MappingProxyType(entries)
        self._namespaces = MappingProxyType(by_kind)

    @classmethod
    def compose(cls, *namespaces: Namespace) -> Registry:
        return cls(namespaces)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> Entry:
        try:
            return self._entries[name]
        except KeyError:
            raise RoutingError(f"Unknown operation {name!r}.") from None

    def names(self) -> list[str]:
        return sorted(self._entries)

    def queries(self) -> list[str]:
        return sorted(name for name, e in self._entries.items() if not e.is_mutation)

    def mutations(self) -> list[str]:
        return sorted(name for name, e in self._entries.items() if e.is_mutation)

    def for_kind(self, kind: str) -> Registry:
        """
        A registry holding only one kind's namespace (by singular or plural name).
        """
        namespace = self._namespaces.get(kind)
        if namespace is None:
            raise RoutingError(f"Unknown resource kind {kind!r}.")
        return Registry([namespace])
