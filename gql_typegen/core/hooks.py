"""Generation hooks for customizing code generation.

Provides protocols for pre- and post-generation hooks that can modify
the schema before generation or transform generated files afterwards.

Example usage:
    from gql_typegen.core.hooks import PreGenerateHook, PostGenerateHook

    # Pre-generation hook to drop types
    class DropConnections:
        def pre_generate(self, schema):
            types = [t for t in schema.types if not t.name.endswith("Connection")]
            return schema.model_copy(update={"types": types})

    # Post-generation hook to add headers
    class AddLicenseHeader:
        def post_generate(self, filename, content):
            return "# Copyright 2024 My Company\\n" + content
"""

from typing import Protocol, runtime_checkable

from .schema import Schema, SchemaType


@runtime_checkable
class PreGenerateHook(Protocol):
    """Protocol for pre-generation hooks.

    Pre-generation hooks receive the schema before code generation and
    return the schema to generate from. Schema models are frozen, so hooks
    return a modified copy rather than mutating their input.
    """

    def pre_generate(self, schema: Schema) -> Schema:
        """Called before code generation.

        Args:
            schema: The introspected schema

        Returns:
            The (possibly modified) schema to use for generation
        """
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks.

    Post-generation hooks receive the rendered text of each file and can
    transform it before it's written.
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Called after code generation for each file.

        Args:
            filename: Path of the generated file relative to the package
            content: The generated code content

        Returns:
            The (possibly transformed) code to write
        """
        ...


class AddHeaderHook:
    """Built-in hook to add a header to generated files.

    Example:
        hook = AddHeaderHook("# Licensed under the MIT license")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        """Add a header to the beginning of the file."""
        if not self.header.endswith("\n"):
            header = self.header + "\n"
        else:
            header = self.header
        return header + content


class FilterTypesHook:
    """Built-in hook to filter schema types by name prefix/suffix.

    Example:
        # Drop everything from the Connection/Edge pagination pattern
        hook = FilterTypesHook(exclude_suffix="Edge")
    """

    def __init__(
        self,
        exclude_prefix: str | None = None,
        exclude_suffix: str | None = None,
        include_prefix: str | None = None,
        include_suffix: str | None = None,
    ):
        self.exclude_prefix = exclude_prefix
        self.exclude_suffix = exclude_suffix
        self.include_prefix = include_prefix
        self.include_suffix = include_suffix

    def _should_include(self, typ: SchemaType) -> bool:
        """Check if a type should be included."""
        name = typ.name or ""
        if self.exclude_prefix and name.startswith(self.exclude_prefix):
            return False
        if self.exclude_suffix and name.endswith(self.exclude_suffix):
            return False
        if self.include_prefix and not name.startswith(self.include_prefix):
            return False
        if self.include_suffix and not name.endswith(self.include_suffix):
            return False
        return True

    def pre_generate(self, schema: Schema) -> Schema:
        """Filter types from the schema.

        Filtered types are also dropped from the possible types of the
        interfaces and unions that remain.
        """
        kept = [t for t in schema.types if self._should_include(t)]
        names = {t.name for t in kept}
        types = []
        for typ in kept:
            if typ.possible_types is not None:
                possible = [p for p in typ.possible_types if p.name in names]
                typ = typ.model_copy(update={"possible_types": possible})
            types.append(typ)
        return schema.model_copy(update={"types": types})


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []

    def add_pre_hook(self, hook: PreGenerateHook):
        """Add a pre-generation hook."""
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_pre_hooks(self, schema: Schema) -> Schema:
        """Run all pre-generation hooks in order."""
        for hook in self.pre_hooks:
            schema = hook.pre_generate(schema)
        return schema

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
