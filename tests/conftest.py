"""Shared fixtures: a small blog schema built from SDL."""

import pytest

from gql_typegen.core.config import Config
from gql_typegen.core.introspection import introspect_sdl
from gql_typegen.core.schema import parse_schema

BLOG_SDL = '''
"""Something that can act."""
interface Actor {
  "The login name."
  login: String!
}

type User implements Actor {
  login: String!
  company: String
  createdAt: DateTime
}

type Bot implements Actor {
  login: String!
}

enum Status {
  "Accepting comments."
  OPEN
  CLOSED
}

scalar DateTime

union SearchResult = User | Post

"""
A blog post.
Second line.
"""
type Post {
  title: String
  status: Status!
  author: Actor
  coAuthors: [Actor!]
  tags: [String!]!
  related: [Post]
  top: SearchResult
}

input PostFilter {
  status: Status
}

type Query {
  post(id: ID!): Post
  search(filter: PostFilter): [SearchResult!]!
  node(id: ID!): Actor
}
'''


@pytest.fixture
def blog_schema():
    """The blog schema as an introspected Schema."""
    return parse_schema(introspect_sdl(BLOG_SDL))


@pytest.fixture
def blog_config():
    """Config giving DateTime a backing type."""
    return Config.model_validate({"scalars": {"DateTime": {"type": "str"}}})
