"""User overrides for scalar and type naming and placement.

The configuration is a JSON document of the form::

    {
        "scalars": {
            "DateTime": {"type": "datetime.datetime", "import": "import datetime"},
            "Long": {"name": "int"}
        },
        "types": {
            "Repository": {
                "name": "Repo",
                "fields": {"createdAt": {"type": "str"}}
            }
        }
    }

Keys may also be written in capitalised form (``"Scalars"``, ``"Type"``).
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _lowercase_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                (k[:1].lower() + k[1:] if isinstance(k, str) else k): v
                for k, v in data.items()
            }
        return data


class FieldConfig(_ConfigModel):
    """Override for a single field of an object or interface."""
    name: str = ""
    import_: str = Field(default="", alias="import")
    type: str = ""


class TypeConfig(_ConfigModel):
    """Override for a named object type.

    Attributes:
        name: Class name to generate instead of the schema name.
        import_: Import statement needed wherever ``type`` is referenced.
        type: An externally defined type to use instead of generating one.
        file: Output file for the declaration.
        fields: Per-field overrides keyed by schema field name.
    """
    name: str = ""
    import_: str = Field(default="", alias="import")
    type: str = ""
    file: str = ""
    fields: dict[str, FieldConfig] = Field(default_factory=dict)


class ScalarConfig(_ConfigModel):
    """Defines the Python type for a scalar.

    The scalar is replaced by a builtin type if ``name`` is a predeclared
    name, in which case ``type`` may be omitted.

    Attributes:
        name: Name of the scalar. Optional if the scalar is not renamed.
        import_: Import statement for ``type``. May be omitted if ``type``
            is a builtin.
        type: Backing type of the generated ``NewType``.
        file: Output file for the definition. Ignored for predeclared names.
    """
    name: str = ""
    import_: str = Field(default="", alias="import")
    type: str = ""
    file: str = ""


class Config(_ConfigModel):
    """Complete override table for one generation run."""
    types: dict[str, TypeConfig] = Field(default_factory=dict)
    scalars: dict[str, ScalarConfig] = Field(default_factory=dict)

    def type_config(self, name: str | None) -> TypeConfig:
        """Return the override for a named type, or an empty one."""
        if name is not None and name in self.types:
            return self.types[name]
        return _EMPTY_TYPE_CONFIG

    def field_config(self, type_name: str | None, field_name: str) -> FieldConfig | None:
        """Return the override for a field, if one is configured."""
        return self.type_config(type_name).fields.get(field_name)


_EMPTY_TYPE_CONFIG = TypeConfig()

DEFAULT_SCALARS: dict[str, ScalarConfig] = {
    "Int": ScalarConfig(name="int"),
    "Float": ScalarConfig(name="float"),
    "String": ScalarConfig(name="str"),
    "Boolean": ScalarConfig(name="bool"),
    "ID": ScalarConfig(type="str"),
}


def scalar_config(config: Config, name: str) -> ScalarConfig | None:
    """Look up the scalar override, falling back to the built-in defaults.

    Returns None when neither the config nor the defaults know the scalar.
    """
    cfg = config.scalars.get(name)
    if cfg is not None:
        return cfg
    return DEFAULT_SCALARS.get(name)


def load_config(path: str | Path | None) -> Config:
    """Load a JSON config file. A missing path gives an empty config."""
    if path is None:
        return Config()
    with open(path) as f:
        return Config.model_validate(json.load(f))
