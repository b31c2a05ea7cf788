"""Renderers producing Python source for a single schema type.

Each renderer takes the config and a named schema type and returns an
``(imports, chunk, deferred_imports)`` triple: the import statements the
chunk needs, the source text itself, and imports that must come after
every declaration of the file. Renderers do no file I/O; the driver
decides where the chunk goes.

Templates are loaded from the package ``templates`` directory:
    - scalar.py.j2 — ``NewType`` over the configured backing type
    - enum.py.j2 — string ``NewType`` plus one constant per value
    - object.py.j2 — pydantic model with accessors and polymorphic decode
    - interface.py.j2 — Protocol, untyped fallback and decode function
    - union.py.j2 — empty Protocol, untyped fallback and decode function
"""

import json
from typing import Any, Callable

from jinja2 import Environment, PackageLoader

from .config import Config, scalar_config
from .errors import MalformedSchemaError, ScalarConfigError
from .placement import file_for, module_path
from .resolver import (
    accessor_name,
    attribute_name,
    decode_expression,
    decoder_name,
    resolve_field_type,
    resolve_name,
    untyped_name,
)
from .schema import SchemaField, SchemaType, TypeKind

Rendered = tuple[list[str], str, list[str]]

RUNTIME_MODULE = "gql_typegen.runtime"

SCALAR_IMPORTS = ["from typing import NewType"]
ENUM_IMPORTS = ["from typing import NewType"]
OBJECT_IMPORTS = [
    "from typing import Any, Optional",
    "from pydantic import BaseModel, ConfigDict, Field, field_validator",
]
INTERFACE_IMPORTS = [
    "from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable",
    "from pydantic import BaseModel, TypeAdapter",
    f"from {RUNTIME_MODULE} import TypenameView, UnknownTypenameError",
]
UNION_IMPORTS = [
    "from typing import Any, Protocol, runtime_checkable",
    "from pydantic import BaseModel",
    f"from {RUNTIME_MODULE} import TypenameView, UnknownTypenameError",
]

POLYMORPHIC_KINDS = (TypeKind.INTERFACE, TypeKind.UNION)


def comment(text: str | None, indent: str = "") -> str:
    """Prefix every line of a description with a comment marker."""
    if not text:
        return ""
    return "".join(f"{indent}# {line}".rstrip() + "\n" for line in text.split("\n"))


def pystr(value: str) -> str:
    """Render a Python string literal."""
    return json.dumps(value)


_env = Environment(
    loader=PackageLoader("gql_typegen", "templates"),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
_env.filters["comment"] = comment
_env.filters["pystr"] = pystr


def _render(template_name: str, **context: Any) -> str:
    return _env.get_template(template_name).render(**context)


def _add(imports: list[str], *items: str):
    for item in items:
        if item and item not in imports:
            imports.append(item)


def reference_imports(
    config: Config,
    typ: SchemaType,
    current_file: str,
    with_decoder: bool = False,
) -> list[str]:
    """Imports needed to refer to ``typ`` from ``current_file``.

    Types declared in another generated file are imported relatively;
    objects mapped to an external type bring their configured import.
    """
    named = typ.named_type()
    if named.kind is TypeKind.OBJECT:
        type_cfg = config.type_config(named.name)
        if type_cfg.type:
            return [type_cfg.import_] if type_cfg.import_ else []

    target = file_for(config, named)
    if not target or target == current_file:
        return []

    module = module_path(current_file, target)
    imports = [f"from {module} import {resolve_name(config, named, nullable=False)}"]
    if with_decoder and named.kind in POLYMORPHIC_KINDS:
        imports.append(f"from {module} import {decoder_name(named.name)}")
    return imports


def _field_context(config: Config, parent: SchemaType, field: SchemaField) -> dict[str, Any]:
    attr = attribute_name(field.name)
    return {
        "attr": attr,
        "accessor": accessor_name(field.name),
        "wire": field.name,
        "type": resolve_field_type(config, parent, field),
        "description": field.description,
        "decoder": None,
        "members": [attr, accessor_name(field.name)],
    }


def _check_members(typ: SchemaType, fields: list[dict[str, Any]]):
    """Raise if two fields would define the same class member."""
    owners: dict[str, str] = {}
    for field in fields:
        for member in field["members"]:
            other = owners.setdefault(member, field["wire"])
            if other != field["wire"]:
                raise MalformedSchemaError(
                    f"fields {other!r} and {field['wire']!r} of {typ.name} "
                    f"both map to the member {member!r}"
                )


def render_scalar(config: Config, typ: SchemaType) -> Rendered:
    """Render a scalar as a NewType over its configured backing type."""
    name = resolve_name(config, typ, nullable=False)
    cfg = scalar_config(config, typ.name)
    if cfg is None or not cfg.type:
        raise ScalarConfigError(
            typ.name,
            f"the definition for the scalar named {name!r} could not be generated without a type",
        )

    imports = list(SCALAR_IMPORTS)
    _add(imports, cfg.import_)
    chunk = _render(
        "scalar.py.j2",
        name=name,
        backing=cfg.type,
        description=typ.description,
    )
    return imports, chunk, []


def render_enum(config: Config, typ: SchemaType) -> Rendered:
    """Render an enum as a string NewType and one constant per value.

    Constants are named ``<Enum>_<VALUE>`` so enums sharing a value name
    do not collide.
    """
    name = resolve_name(config, typ, nullable=False)
    values = [
        {
            "const": f"{name}_{value.name}",
            "name": value.name,
            "description": value.description,
        }
        for value in typ.enum_values or []
    ]
    chunk = _render("enum.py.j2", name=name, values=values, description=typ.description)
    return list(ENUM_IMPORTS), chunk, []


def _is_local_object(config: Config, typ: SchemaType) -> bool:
    named = typ.named_type()
    return named.kind is TypeKind.OBJECT and not config.type_config(named.name).type


def render_object(config: Config, typ: SchemaType) -> Rendered:
    """Render an object as a pydantic model.

    Fields whose named type is an interface or a union are decoded through
    that type's ``decode_*`` function instead of directly. Objects declared
    in another file are imported at the end of the module, after every
    class is defined, so object modules may refer to each other.
    """
    name = resolve_name(config, typ, nullable=False)
    current_file = file_for(config, typ)
    imports = list(OBJECT_IMPORTS)
    deferred: list[str] = []

    fields = []
    for field in typ.fields or []:
        context = _field_context(config, typ, field)
        override = config.field_config(typ.name, field.name)
        if override is not None:
            _add(imports, override.import_)
        if override is None or not override.type:
            named = field.type.named_type()
            if named.kind in POLYMORPHIC_KINDS:
                context["decoder"] = decode_expression(field.type, decoder_name(named.name))
                context["members"].append(f"decode_{context['attr']}")
            references = reference_imports(config, field.type, current_file, with_decoder=True)
            if _is_local_object(config, field.type):
                _add(deferred, *references)
            else:
                _add(imports, *references)
        fields.append(context)
    _check_members(typ, fields)

    chunk = _render("object.py.j2", name=name, fields=fields, description=typ.description)
    return imports, chunk, deferred


def _fallback_context(config: Config, parent: SchemaType, field: SchemaField,
                      context: dict[str, Any], current_file: str) -> dict[str, Any]:
    """Coercion of a raw dict entry for an untyped fallback accessor."""
    override = config.field_config(parent.name, field.name)
    named = field.type.named_type()
    runtime_imports: list[str] = []
    if (override is None or not override.type) and named.kind in POLYMORPHIC_KINDS:
        decoder = decoder_name(named.name)
        target = file_for(config, named)
        if target and target != current_file:
            runtime_imports.append(f"from {module_path(current_file, target)} import {decoder}")
        coerce = decode_expression(field.type, decoder)
    else:
        if override is None or not override.type:
            runtime_imports = reference_imports(config, field.type, current_file)
        coerce = f"(None if value is None else TypeAdapter({context['type']}).validate_python(value))"
    return {**context, "coerce": coerce, "runtime_imports": runtime_imports}


def _variants(config: Config, typ: SchemaType, current_file: str, imports: list[str]) -> list[dict]:
    variants = []
    for ref in typ.possible_types or []:
        target = file_for(config, ref)
        type_cfg = config.type_config(ref.name)
        if type_cfg.type:
            _add(imports, type_cfg.import_)
        module = None
        if target and target != current_file:
            module = module_path(current_file, target)
        variants.append({
            "typename": ref.name,
            "name": resolve_name(config, ref, nullable=False),
            "module": module,
        })
    return variants


def _variant_imports(variants: list[dict]) -> list[tuple[str, list[str]]]:
    """Group variant imports by module, in first-use order."""
    grouped: dict[str, list[str]] = {}
    for variant in variants:
        if variant["module"]:
            names = grouped.setdefault(variant["module"], [])
            if variant["name"] not in names:
                names.append(variant["name"])
    return list(grouped.items())


def _variant_check(variants: list[dict]) -> str:
    """The isinstance target matching any variant class, or empty."""
    names: list[str] = []
    for variant in variants:
        if variant["name"] not in names:
            names.append(variant["name"])
    if len(names) == 1:
        return names[0]
    return f"({', '.join(names)})" if names else ""


def _polymorphic_context(config: Config, typ: SchemaType, current_file: str,
                         imports: list[str]) -> dict[str, Any]:
    name = resolve_name(config, typ, nullable=False)
    variants = _variants(config, typ, current_file, imports)
    return {
        "name": name,
        "schema_name": typ.name,
        "untyped": untyped_name(name),
        "decoder": decoder_name(typ.name),
        "variants": variants,
        "variant_check": _variant_check(variants),
        "variant_imports": _variant_imports(variants),
        "description": typ.description,
    }


def render_interface(config: Config, typ: SchemaType) -> Rendered:
    """Render an interface as a Protocol with a polymorphic decoder.

    Types referenced by accessor annotations are only imported for type
    checking. The untyped fallback and the decoder import what they need
    inside their function bodies, so the interfaces module never imports
    the types module at load time.
    """
    current_file = file_for(config, typ)
    imports = list(INTERFACE_IMPORTS)

    fields = []
    for field in typ.fields or []:
        context = _field_context(config, typ, field)
        fields.append(_fallback_context(config, typ, field, context, current_file))
        override = config.field_config(typ.name, field.name)
        if override is not None:
            _add(imports, override.import_)
        if override is None or not override.type:
            for imp in reference_imports(config, field.type, current_file):
                _add(imports, f"if TYPE_CHECKING:\n    {imp}")
    _check_members(typ, fields)

    context = _polymorphic_context(config, typ, current_file, imports)
    chunk = _render("interface.py.j2", fields=fields, **context)
    return imports, chunk, []


def render_union(config: Config, typ: SchemaType) -> Rendered:
    """Render a union as an empty Protocol with a polymorphic decoder."""
    current_file = file_for(config, typ)
    imports = list(UNION_IMPORTS)
    context = _polymorphic_context(config, typ, current_file, imports)
    chunk = _render("union.py.j2", **context)
    return imports, chunk, []


RENDERERS: dict[TypeKind, Callable[[Config, SchemaType], Rendered]] = {
    TypeKind.OBJECT: render_object,
    TypeKind.SCALAR: render_scalar,
    TypeKind.ENUM: render_enum,
    TypeKind.INTERFACE: render_interface,
    TypeKind.UNION: render_union,
}


def render(config: Config, typ: SchemaType) -> Rendered:
    """Render any supported named type."""
    renderer = RENDERERS.get(typ.kind)
    if renderer is None:
        raise MalformedSchemaError(f"don't know how to render {typ.kind.value} {typ.name}")
    return renderer(config, typ)
