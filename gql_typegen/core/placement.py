"""Placement of generated declarations into output files."""

from pathlib import PurePosixPath

from .config import Config, scalar_config
from .errors import MalformedSchemaError
from .resolver import is_predeclared, resolve_name
from .schema import SchemaType, TypeKind

SCALARS_FILE = "scalars.py"
TYPES_FILE = "types.py"
ENUMS_FILE = "enums.py"
INTERFACES_FILE = "interfaces.py"
UNIONS_FILE = "unions.py"

_DEFAULT_FILES = {
    TypeKind.OBJECT: TYPES_FILE,
    TypeKind.ENUM: ENUMS_FILE,
    TypeKind.INTERFACE: INTERFACES_FILE,
    TypeKind.UNION: UNIONS_FILE,
}


def file_for(config: Config, typ: SchemaType) -> str:
    """Return the file a type's declaration belongs in.

    An empty string means no declaration is generated: predeclared
    builtins, objects mapped to an external type and input objects.
    """
    if typ.kind.is_wrapper:
        raise MalformedSchemaError(f"don't know how to get file for {typ!r}")

    name = resolve_name(config, typ, nullable=False)
    if is_predeclared(name):
        return ""

    if typ.kind is TypeKind.SCALAR:
        cfg = scalar_config(config, typ.name)
        if cfg is not None and cfg.file:
            return cfg.file
        return SCALARS_FILE
    if typ.kind is TypeKind.INPUT_OBJECT:
        return ""

    type_cfg = config.type_config(typ.name)
    if typ.kind is TypeKind.OBJECT and type_cfg.type:
        return ""
    if type_cfg.file:
        return type_cfg.file
    return _DEFAULT_FILES[typ.kind]


def module_path(from_file: str, to_file: str) -> str:
    """Relative module path for importing ``to_file`` from ``from_file``.

    Both are paths relative to the generated package root, e.g.
    ``module_path("sub/a.py", "types.py") == "..types"``.
    """
    from_dir = PurePosixPath(from_file).parent.parts
    target = PurePosixPath(to_file).with_suffix("").parts
    common = 0
    while (
        common < len(from_dir)
        and common < len(target) - 1
        and from_dir[common] == target[common]
    ):
        common += 1
    dots = "." * (1 + len(from_dir) - common)
    return dots + ".".join(target[common:])
