"""Flat field-name to type-name lookup built from explicit maps or introspection."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from nodecache.config.normalization import DEFAULT_CONNECTION_SUFFIX
from nodecache.domain.ports.type_resolution import TypeResolver

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

log = getLogger(__name__)


class IntrospectionModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IntrospectionTypeRef(IntrospectionModel):
    kind: str
    name: str | None = None
    of_type: IntrospectionTypeRef | None = Field(default=None, alias="ofType")

    def named_type(self) -> str | None:
        ref: IntrospectionTypeRef | None = self
        while ref is not None:
            if ref.name is not None:
                return ref.name
            ref = ref.of_type
        return None


class IntrospectionField(IntrospectionModel):
    name: str
    type: IntrospectionTypeRef


class IntrospectionType(IntrospectionModel):
    kind: str
    name: str
    fields: list[IntrospectionField] | None = None

    def field_type(self, field_name: str) -> str | None:
        for type_field in self.fields or ():
            if type_field.name == field_name:
                return type_field.type.named_type()
        return None


class IntrospectionSchema(IntrospectionModel):
    types: list[IntrospectionType]


def guess_element_type(connection_type: str, suffix: str = DEFAULT_CONNECTION_SUFFIX) -> str:
    """``ActivitiesConnection`` -> ``Activity``; ``UsersConnection`` -> ``User``."""

    base = connection_type.removesuffix(suffix)
    if base.endswith("ies"):
        return base[:-3] + "y"
    if base.endswith("sses"):
        return base[:-2]
    if base.endswith("s") and not base.endswith("ss"):
        return base[:-1]
    return base


@dataclass(slots=True)
class StaticTypeMap:
    field_types: dict[str, str] = field(default_factory=dict[str, str])
    element_types: dict[str, str] = field(default_factory=dict[str, str])
    connection_suffix: str = DEFAULT_CONNECTION_SUFFIX

    def resolve_type(self, field_name: str) -> str | None:
        return self.field_types.get(field_name)

    def infer_element_type(self, connection_type: str) -> str:
        explicit = self.element_types.get(connection_type)
        if explicit is not None:
            return explicit
        return guess_element_type(connection_type, self.connection_suffix)

    @classmethod
    def from_introspection(
        cls,
        payload: Mapping[str, object],
        *,
        connection_suffix: str = DEFAULT_CONNECTION_SUFFIX,
    ) -> StaticTypeMap:
        """Build the map from an introspection result (with or without ``data``)."""

        raw_schema = payload.get("__schema")
        if raw_schema is None:
            data = payload.get("data")
            if isinstance(data, dict):
                raw_schema = data.get("__schema")
        if raw_schema is None:
            raise ValueError("Introspection payload has no __schema member")
        schema = IntrospectionSchema.model_validate(raw_schema)

        object_types = {
            schema_type.name: schema_type
            for schema_type in schema.types
            if schema_type.kind == "OBJECT" and not schema_type.name.startswith("__")
        }

        field_types: dict[str, str] = {}
        for schema_type in object_types.values():
            for type_field in schema_type.fields or ():
                named = type_field.type.named_type()
                if named is None:
                    continue
                existing = field_types.setdefault(type_field.name, named)
                if existing != named:
                    log.debug(
                        "Field %r resolves to %s and %s; keeping %s",
                        type_field.name,
                        existing,
                        named,
                        existing,
                    )

        element_types: dict[str, str] = {}
        for name, schema_type in object_types.items():
            if not name.endswith(connection_suffix):
                continue
            element = schema_type.field_type("nodes")
            if element is None:
                edge_type = object_types.get(schema_type.field_type("edges") or "")
                element = edge_type.field_type("node") if edge_type else None
            if element is not None:
                element_types[name] = element

        log.info(
            "Loaded type map: %d fields, %d connection types",
            len(field_types),
            len(element_types),
        )
        return cls(
            field_types=field_types,
            element_types=element_types,
            connection_suffix=connection_suffix,
        )

    @classmethod
    def from_file(cls, path: Path, **kwargs: str) -> StaticTypeMap:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Introspection file {path} must hold a JSON object")
        return cls.from_introspection(payload, **kwargs)


if TYPE_CHECKING:
    _resolver_check: TypeResolver = StaticTypeMap()
