"""Models for the GraphQL schema introspection system.

These mirror the ``__schema`` object returned by the standard
introspection query. Only the parts needed for code generation are
modelled; unknown keys are ignored.

See https://spec.graphql.org/October2021/#sec-Schema-Introspection
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import MalformedSchemaError


class TypeKind(str, Enum):
    """The ``__TypeKind`` enum."""

    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"
    LIST = "LIST"
    NON_NULL = "NON_NULL"

    @property
    def is_wrapper(self) -> bool:
        return self in (TypeKind.LIST, TypeKind.NON_NULL)


class _IntrospectionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class EnumValue(_IntrospectionModel):
    """Represents a single value of an enum type."""
    name: str
    description: str | None = None
    is_deprecated: bool = Field(default=False, alias="isDeprecated")
    deprecation_reason: str | None = Field(default=None, alias="deprecationReason")


class SchemaField(_IntrospectionModel):
    """Represents a field of an object or interface type."""
    name: str
    description: str | None = None
    type: "SchemaType"
    is_deprecated: bool = Field(default=False, alias="isDeprecated")
    deprecation_reason: str | None = Field(default=None, alias="deprecationReason")


class SchemaType(_IntrospectionModel):
    """One node of the introspected type graph.

    Named kinds carry ``name``; LIST and NON_NULL carry ``of_type`` instead.
    Type references inside fields are nodes too, usually with only
    ``kind``, ``name`` and ``of_type`` populated.
    """
    kind: TypeKind
    name: str | None = None
    description: str | None = None
    fields: list[SchemaField] | None = None
    interfaces: list["SchemaType"] | None = None
    possible_types: list["SchemaType"] | None = Field(default=None, alias="possibleTypes")
    enum_values: list[EnumValue] | None = Field(default=None, alias="enumValues")
    of_type: "SchemaType | None" = Field(default=None, alias="ofType")

    def unwrap(self) -> "SchemaType":
        """Return the type wrapped by a LIST or NON_NULL node."""
        if self.of_type is None:
            raise MalformedSchemaError(
                f"{self.kind.value} type node has no ofType: {self!r}"
            )
        return self.of_type

    def named_type(self) -> "SchemaType":
        """Walk the ofType chain down to the innermost named node."""
        node = self
        while node.kind.is_wrapper:
            node = node.unwrap()
        return node


SchemaField.model_rebuild()


class RootTypeRef(_IntrospectionModel):
    """Reference to one of the schema's root operation types."""
    name: str


class Schema(_IntrospectionModel):
    """The ``__schema`` object of an introspection response."""
    types: list[SchemaType] = Field(default_factory=list)
    query_type: RootTypeRef | None = Field(default=None, alias="queryType")
    mutation_type: RootTypeRef | None = Field(default=None, alias="mutationType")
    subscription_type: RootTypeRef | None = Field(default=None, alias="subscriptionType")

    def get_type(self, name: str) -> SchemaType | None:
        """Look up a named type."""
        for typ in self.types:
            if typ.name == name:
                return typ
        return None


def parse_schema(document: dict[str, Any]) -> Schema:
    """Build a Schema from a decoded introspection document.

    Accepts a full response (``{"data": {"__schema": ...}}``), the
    ``{"__schema": ...}`` object, or the bare schema object.
    """
    if "data" in document and isinstance(document["data"], dict):
        document = document["data"]
    if "__schema" in document:
        document = document["__schema"]
    return Schema.model_validate(document)
