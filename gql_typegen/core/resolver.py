"""Resolution of schema type references to Python type expressions."""

import builtins
import keyword
import logging
import re

from pydantic import BaseModel

from .config import Config, scalar_config
from .errors import MalformedSchemaError, ScalarConfigError
from .schema import SchemaField, SchemaType, TypeKind

logger = logging.getLogger(__name__)

# Builtin type names that must never be shadowed by a generated declaration.
PREDECLARED_TYPES = frozenset({
    "bool", "bytearray", "bytes", "complex", "dict", "float", "frozenset",
    "int", "list", "object", "set", "str", "tuple",
})

# Module-level names the generated modules rely on.
RESERVED_TYPE_NAMES = PREDECLARED_TYPES | frozenset({
    "Any", "BaseModel", "ConfigDict", "Field", "NewType", "Optional",
    "Protocol", "TYPE_CHECKING", "TypeAdapter", "TypenameView",
    "UnknownTypenameError", "annotations", "field_validator", "isinstance",
    "runtime_checkable", "type",
    # decode function locals
    "cls", "data", "self", "typename", "value",
})

# Class-body names a generated model attribute must not rebind. The names
# added by the site module are listed so the set does not depend on it.
RESERVED_ATTRIBUTES = frozenset(
    name for name in dir(builtins) if not name.startswith("_")
) | frozenset(
    name for name in dir(BaseModel) if not name.startswith("_")
) | frozenset({"copyright", "credits", "exit", "help", "license", "quit"})

NULLABLE = "Optional[{}]"
SEQUENCE = "list[{}]"


def is_predeclared(name: str) -> bool:
    """Check if a name is a Python builtin type."""
    return name in PREDECLARED_TYPES


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _member_base(field_name: str) -> str:
    name = snake_case(field_name).lstrip("_")
    if not name or name[0].isdigit():
        name = f"field_{name}"
    return name


def attribute_name(field_name: str) -> str:
    """Python attribute name for a schema field.

    Leading underscores are dropped since pydantic treats them as private.
    Keywords, builtins and BaseModel attributes get a trailing underscore.
    """
    name = _member_base(field_name)
    if keyword.iskeyword(name) or name in RESERVED_ATTRIBUTES:
        name = f"{name}_"
    return name


def accessor_name(field_name: str) -> str:
    """Name of the ``get_*`` accessor for a schema field."""
    return f"get_{_member_base(field_name)}"


def type_identifier(name: str) -> str:
    """Python identifier for a declared schema type.

    Names that would rebind a keyword or a name the generated modules
    use get a trailing underscore.
    """
    if keyword.iskeyword(name) or name in RESERVED_TYPE_NAMES:
        return f"{name}_"
    return name


def decoder_name(type_name: str) -> str:
    """Name of the polymorphic decode function for an interface or union."""
    return f"decode_{snake_case(type_name)}"


def untyped_name(type_name: str) -> str:
    """Name of the fallback class for payloads without a usable __typename."""
    return f"Untyped{type_name}"


def _nullable(name: str, nullable: bool) -> str:
    return NULLABLE.format(name) if nullable else name


def _require_name(typ: SchemaType) -> str:
    if not typ.name:
        raise MalformedSchemaError(f"unable to get name for type {typ!r}")
    return typ.name


def resolve_name(config: Config, typ: SchemaType, nullable: bool = True) -> str:
    """Resolve a type reference to a Python type expression.

    NON_NULL strips the Optional marker from whatever it wraps. LIST items
    are nullable unless wrapped in their own NON_NULL. Interfaces are never
    wrapped in Optional: a missing value decodes to the untyped fallback.
    """
    if typ.kind is TypeKind.NON_NULL:
        return resolve_name(config, typ.unwrap(), False)
    if typ.kind is TypeKind.LIST:
        item = resolve_name(config, typ.unwrap(), True)
        return _nullable(SEQUENCE.format(item), nullable)

    name = _require_name(typ)

    if typ.kind is TypeKind.SCALAR:
        cfg = scalar_config(config, name)
        if cfg is None:
            logger.warning("no configuration for scalar %r, using its schema name", name)
            return _nullable(type_identifier(name), nullable)
        if cfg.name and is_predeclared(cfg.name):
            if cfg.type and cfg.type != cfg.name:
                raise ScalarConfigError(
                    name,
                    f"the scalar named {cfg.name!r} could not have the type {cfg.type!r}",
                )
            return _nullable(cfg.name, nullable)
        return _nullable(cfg.name or type_identifier(name), nullable)

    if typ.kind is TypeKind.OBJECT:
        type_cfg = config.type_config(name)
        return _nullable(type_cfg.type or type_cfg.name or type_identifier(name), nullable)
    if typ.kind is TypeKind.INTERFACE:
        return type_identifier(name)
    return _nullable(type_identifier(name), nullable)


def resolve_field_type(config: Config, parent: SchemaType, field: SchemaField) -> str:
    """Resolve the annotation of a field, honouring per-field overrides."""
    override = config.field_config(parent.name, field.name)
    if override is not None and override.type:
        return override.type
    return resolve_name(config, field.type, True)


def decode_expression(typ: SchemaType, decoder: str, var: str = "value", nullable: bool = True,
                      depth: int = 0) -> str:
    """Build an expression decoding ``var`` through ``decoder``.

    List wrappers are mapped element by element. None is kept as None
    wherever the resolved type is Optional; interfaces are never Optional
    so their decoder always sees the raw value.
    """
    if typ.kind is TypeKind.NON_NULL:
        return decode_expression(typ.unwrap(), decoder, var, False, depth)
    if typ.kind is TypeKind.LIST:
        item = f"item{depth}"
        inner = decode_expression(typ.unwrap(), decoder, item, True, depth + 1)
        expr = f"[{inner} for {item} in {var}]"
    elif typ.kind is TypeKind.INTERFACE:
        return f"{decoder}({var})"
    else:
        expr = f"{decoder}({var})"
    if nullable:
        return f"(None if {var} is None else {expr})"
    return expr
