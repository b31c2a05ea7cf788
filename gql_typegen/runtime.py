"""Runtime support imported by generated code.

Generated ``decode_*`` functions read the ``__typename`` discriminator
through :class:`TypenameView` before decoding the full payload, and raise
:class:`UnknownTypenameError` for a discriminator that names no known
variant.
"""

from pydantic import BaseModel, ConfigDict, Field


class TypenameView(BaseModel):
    """Reads only the ``__typename`` meta-field of a payload."""

    model_config = ConfigDict(populate_by_name=True)

    typename: str | None = Field(default=None, alias="__typename")


class UnknownTypenameError(Exception):
    """A payload's ``__typename`` matches none of the possible types.

    Not a ValueError, so pydantic validators let it through unwrapped.
    """

    def __init__(self, type_name: str, typename: str):
        self.type_name = type_name
        self.typename = typename
        super().__init__(f"{type_name}: unexpected __typename {typename!r}")
