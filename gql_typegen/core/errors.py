"""Errors raised while generating code from an introspected schema."""


class GenerationError(ValueError):
    """Base class for fatal generation errors."""


class MalformedSchemaError(GenerationError):
    """The schema document violates the introspection contract.

    Raised for named kinds without a name, wrapper kinds without ``ofType``
    and kinds the generator does not know how to place or render.
    """


class ScalarConfigError(GenerationError):
    """A scalar cannot be generated from the configuration as written."""

    def __init__(self, scalar_name: str, message: str):
        self.scalar_name = scalar_name
        super().__init__(message)
