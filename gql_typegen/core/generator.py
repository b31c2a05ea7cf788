"""Code generator for introspected GraphQL schemas.

Walks the schema types in document order, places each one in an output
file, renders it and flushes the collected files to a sink:

    generator = CodeGenerator(schema, config, package="github")
    generator.write(DirectorySink("./generated"))
"""

import logging

from .config import Config
from .hooks import HookRunner
from .output import FileSink, OutputFiles
from .placement import file_for
from .renderers import RENDERERS
from .schema import Schema, SchemaType, TypeKind

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "generated"


def is_introspection_type(typ: SchemaType) -> bool:
    """Check if a type is one of the reserved ``__`` introspection types."""
    return bool(typ.name) and typ.name.startswith("__")


class CodeGenerator:
    """Generates Python models from an introspected schema.

    Each instance owns the output files of a single run; the schema and
    config are read-only inputs.
    """

    def __init__(
        self,
        schema: Schema,
        config: Config | None = None,
        package: str = DEFAULT_PACKAGE,
        hooks: HookRunner | None = None,
    ):
        """Initialize the code generator.

        Args:
            schema: The introspected schema
            config: Scalar and type overrides
            package: Name of the generated package
            hooks: Optional hooks; pre-generate hooks run on the schema
        """
        self.hooks = hooks or HookRunner()
        self.schema = self.hooks.run_pre_hooks(schema)
        self.config = config or Config()
        self.package = package
        self.files = OutputFiles()
        self.skipped: list[SchemaType] = []
        self._generated = False

    def generate(self) -> OutputFiles:
        """Render every supported type into its output file."""
        if self._generated:
            return self.files

        for typ in self.schema.types:
            if is_introspection_type(typ):
                logger.debug("skipping introspection type %s", typ.name)
                continue

            file = file_for(self.config, typ)
            if not file:
                if typ.kind is TypeKind.INPUT_OBJECT:
                    logger.info("SKIP %s %s: input objects are not supported", typ.kind.value, typ.name)
                    self.skipped.append(typ)
                else:
                    logger.debug("skipping %s %s: no declaration needed", typ.kind.value, typ.name)
                continue

            renderer = RENDERERS.get(typ.kind)
            if renderer is None:
                logger.info("SKIP %s %s", typ.kind.value, typ.name)
                self.skipped.append(typ)
                continue

            imports, chunk, deferred_imports = renderer(self.config, typ)
            self.files.get(file, self.package).add(imports, chunk, deferred_imports)

        self._generated = True
        return self.files

    def write(self, sink: FileSink) -> OutputFiles:
        """Generate (if needed) and flush every output file to ``sink``."""
        files = self.generate()
        for file, output in files.items():
            logger.debug("flushing %s (%d chunks)", file, len(output.chunks))
            sink.write(file, output.package, output.imports, output.chunks,
                       output.deferred_imports)
        return files
