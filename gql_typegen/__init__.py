"""Typed Python models from GraphQL introspection."""
