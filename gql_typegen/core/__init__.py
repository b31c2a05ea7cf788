"""Core modules for GraphQL code generation."""

from .config import Config, FieldConfig, ScalarConfig, TypeConfig, load_config, scalar_config
from .errors import GenerationError, MalformedSchemaError, ScalarConfigError
from .generator import CodeGenerator
from .hooks import (
    AddHeaderHook,
    FilterTypesHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .introspection import GraphQLError, fetch_introspection, load_schema_document
from .output import DirectorySink, FileSink, MemorySink, OutputFile, OutputFiles, render_file
from .placement import file_for
from .renderers import (
    render,
    render_enum,
    render_interface,
    render_object,
    render_scalar,
    render_union,
)
from .resolver import is_predeclared, resolve_field_type, resolve_name
from .schema import EnumValue, Schema, SchemaField, SchemaType, TypeKind, parse_schema

__all__ = [
    # Schema model
    "EnumValue",
    "Schema",
    "SchemaField",
    "SchemaType",
    "TypeKind",
    "parse_schema",
    # Config model
    "Config",
    "FieldConfig",
    "ScalarConfig",
    "TypeConfig",
    "load_config",
    "scalar_config",
    # Errors
    "GenerationError",
    "MalformedSchemaError",
    "ScalarConfigError",
    # Resolution and placement
    "is_predeclared",
    "resolve_field_type",
    "resolve_name",
    "file_for",
    # Renderers
    "render",
    "render_enum",
    "render_interface",
    "render_object",
    "render_scalar",
    "render_union",
    # Output
    "DirectorySink",
    "FileSink",
    "MemorySink",
    "OutputFile",
    "OutputFiles",
    "render_file",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FilterTypesHook",
    "HookRunner",
    # Introspection
    "GraphQLError",
    "fetch_introspection",
    "load_schema_document",
    # Generator
    "CodeGenerator",
]
