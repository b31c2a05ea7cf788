"""End-to-end tests: generate a package, import it and decode payloads."""

import importlib
import logging
import sys

import pytest

from gql_typegen.core.config import Config
from gql_typegen.core.errors import MalformedSchemaError, ScalarConfigError
from gql_typegen.core.generator import CodeGenerator
from gql_typegen.core.hooks import FilterTypesHook, HookRunner
from gql_typegen.core.introspection import introspect_sdl
from gql_typegen.core.output import DirectorySink, MemorySink
from gql_typegen.core.schema import Schema, SchemaType, TypeKind, parse_schema
from gql_typegen.runtime import UnknownTypenameError

from conftest import BLOG_SDL

PACKAGE = "blog_models"


@pytest.fixture(scope="module")
def generated(tmp_path_factory):
    """Generate the blog schema into a temporary package and import it."""
    output_dir = tmp_path_factory.mktemp("generated")
    schema = parse_schema(introspect_sdl(BLOG_SDL))
    config = Config.model_validate({"scalars": {"DateTime": {"type": "str"}}})
    CodeGenerator(schema, config, package=PACKAGE).write(DirectorySink(output_dir))

    sys.path.insert(0, str(output_dir))
    try:
        yield output_dir / PACKAGE
    finally:
        sys.path.remove(str(output_dir))
        for name in list(sys.modules):
            if name == PACKAGE or name.startswith(PACKAGE + "."):
                del sys.modules[name]


@pytest.fixture
def types(generated):
    return importlib.import_module(f"{PACKAGE}.types")


@pytest.fixture
def interfaces(generated):
    return importlib.import_module(f"{PACKAGE}.interfaces")


@pytest.fixture
def unions(generated):
    return importlib.import_module(f"{PACKAGE}.unions")


@pytest.fixture
def enums(generated):
    return importlib.import_module(f"{PACKAGE}.enums")


@pytest.fixture
def build_package(tmp_path, monkeypatch):
    """Generate SDL into a temporary package; returns a module importer."""
    monkeypatch.syspath_prepend(str(tmp_path))
    packages = []

    def build(sdl, config, package):
        schema = parse_schema(introspect_sdl(sdl))
        generator = CodeGenerator(schema, Config.model_validate(config), package=package)
        generator.write(DirectorySink(tmp_path))
        packages.append(package)
        return lambda module: importlib.import_module(f"{package}.{module}")

    yield build
    for name in list(sys.modules):
        if any(name == p or name.startswith(p + ".") for p in packages):
            del sys.modules[name]


# =============================================================================
# Tests: Generated Files
# =============================================================================


class TestGeneratedFiles:
    """Tests for what the driver writes."""

    def test_files(self, generated):
        files = {p.name for p in generated.glob("*.py")}
        assert files == {
            "__init__.py",
            "types.py",
            "interfaces.py",
            "unions.py",
            "enums.py",
            "scalars.py",
        }

    def test_header(self, generated):
        content = (generated / "types.py").read_text()
        assert content.startswith(
            "# Code generated by gql-typegen. DO NOT EDIT.\n"
            f"# Package: {PACKAGE}\n"
            "\n"
            "from __future__ import annotations\n"
        )

    def test_input_objects_and_introspection_types_skipped(self, generated):
        content = "".join(p.read_text() for p in generated.glob("*.py"))
        assert "PostFilter" not in content
        assert "__Type" not in content
        assert "__TypeKind" not in content

    def test_scalars(self, generated):
        content = (generated / "scalars.py").read_text()
        assert 'DateTime = NewType("DateTime", str)' in content
        assert 'ID = NewType("ID", str)' in content

    def test_imports_deduplicated(self, generated):
        content = (generated / "types.py").read_text()
        assert content.count("from .interfaces import decode_actor\n") == 1


# =============================================================================
# Tests: Generated Models
# =============================================================================


class TestGeneratedModels:
    """Tests for the generated pydantic models."""

    def test_enum_constants(self, enums):
        assert enums.Status_OPEN == "OPEN"
        assert enums.Status_CLOSED == "CLOSED"

    def test_wire_names_and_accessors(self, types):
        user = types.User.model_validate(
            {"login": "octocat", "company": "GitHub", "createdAt": "2011-01-25T18:44:36Z"}
        )
        assert user.get_login() == "octocat"
        assert user.get_company() == "GitHub"
        assert user.get_created_at() == "2011-01-25T18:44:36Z"

    def test_round_trip(self, types):
        user = types.User.model_validate({"login": "octocat", "company": None})
        assert types.User.model_validate(user.model_dump(by_alias=True)) == user

    def test_unselected_fields_default_to_none(self, types):
        user = types.User.model_validate({"login": "octocat"})
        assert user.get_company() is None

    def test_self_reference(self, types):
        post = types.Post.model_validate({"related": [{"title": "Earlier"}, None]})
        assert post.get_related()[0].get_title() == "Earlier"
        assert post.get_related()[1] is None


# =============================================================================
# Tests: Polymorphic Decoding
# =============================================================================


class TestInterfaceDecoding:
    """Tests for the generated interface decoder."""

    def test_dispatch_to_concrete_type(self, types, interfaces):
        payload = {"__typename": "User", "login": "octocat", "company": "GitHub"}
        actor = interfaces.decode_actor(payload)
        assert isinstance(actor, types.User)
        assert actor == types.User.model_validate(payload)

    def test_concrete_type_satisfies_protocol(self, types, interfaces):
        actor = interfaces.decode_actor({"__typename": "Bot", "login": "dependabot"})
        assert isinstance(actor, types.Bot)
        assert isinstance(actor, interfaces.Actor)

    def test_unknown_typename(self, interfaces):
        with pytest.raises(UnknownTypenameError) as exc_info:
            interfaces.decode_actor({"__typename": "Robot", "login": "r2d2"})
        assert "Actor" in str(exc_info.value)
        assert "Robot" in str(exc_info.value)
        assert exc_info.value.type_name == "Actor"
        assert exc_info.value.typename == "Robot"

    def test_missing_typename_uses_untyped_fallback(self, interfaces):
        payload = {"login": "ghost"}
        actor = interfaces.decode_actor(payload)
        assert isinstance(actor, interfaces.UntypedActor)
        assert isinstance(actor, interfaces.Actor)
        assert actor.get_login() == "ghost"
        assert dict(actor) == payload

    def test_empty_typename_uses_untyped_fallback(self, interfaces):
        actor = interfaces.decode_actor({"__typename": "", "login": "ghost"})
        assert isinstance(actor, interfaces.UntypedActor)

    def test_variant_instance_passes_through(self, types, interfaces):
        user = types.User.model_validate({"login": "octocat"})
        assert interfaces.decode_actor(user) is user

    def test_undeclared_model_rejected(self, types, interfaces):
        post = types.Post.model_validate({"title": "Hello"})
        with pytest.raises(UnknownTypenameError) as exc_info:
            interfaces.decode_actor(post)
        assert exc_info.value.type_name == "Actor"
        assert exc_info.value.typename == "Post"

    def test_fallback_accessor_coerces(self, interfaces):
        actor = interfaces.decode_actor({"login": "ghost"})
        assert actor.get_login() == "ghost"
        assert interfaces.decode_actor({}).get_login() is None


class TestObjectDecoding:
    """Tests for interface and union fields inside generated models."""

    def test_interface_field(self, types):
        post = types.Post.model_validate(
            {"title": "Hello", "author": {"__typename": "Bot", "login": "dependabot"}}
        )
        assert isinstance(post.get_author(), types.Bot)
        assert post.get_author().get_login() == "dependabot"

    def test_interface_list_field(self, types, interfaces):
        post = types.Post.model_validate({
            "coAuthors": [
                {"__typename": "User", "login": "octocat"},
                {"login": "ghost"},
            ],
        })
        co_authors = post.get_co_authors()
        assert isinstance(co_authors[0], types.User)
        assert isinstance(co_authors[1], interfaces.UntypedActor)

    def test_null_interface_list(self, types):
        post = types.Post.model_validate({"coAuthors": None})
        assert post.get_co_authors() is None

    def test_unknown_typename_propagates(self, types):
        with pytest.raises(UnknownTypenameError):
            types.Post.model_validate({"author": {"__typename": "Robot", "login": "r2d2"}})

    def test_union_field(self, types):
        post = types.Post.model_validate({"top": {"__typename": "Post", "title": "Pinned"}})
        assert isinstance(post.get_top(), types.Post)
        assert post.get_top().get_title() == "Pinned"

    def test_union_list_on_query(self, types):
        query = types.Query.model_validate({
            "search": [
                {"__typename": "User", "login": "octocat"},
                {"__typename": "Post", "title": "Hello"},
            ],
        })
        results = query.get_search()
        assert isinstance(results[0], types.User)
        assert isinstance(results[1], types.Post)

    def test_union_decoder(self, unions):
        with pytest.raises(UnknownTypenameError) as exc_info:
            unions.decode_search_result({"__typename": "Bot"})
        assert "SearchResult" in str(exc_info.value)


# =============================================================================
# Tests: Driver
# =============================================================================


class TestCodeGenerator:
    """Tests for the driver itself."""

    def test_output_is_deterministic(self, blog_schema, blog_config):
        first, second = MemorySink(), MemorySink()
        CodeGenerator(blog_schema, blog_config).write(first)
        CodeGenerator(blog_schema, blog_config).write(second)
        assert first.files == second.files

    def test_declaration_order_follows_document(self, blog_schema, blog_config):
        files = CodeGenerator(blog_schema, blog_config).generate()
        names = [t.name for t in blog_schema.types if t.kind is TypeKind.OBJECT
                 and not t.name.startswith("__")]
        chunks = files["types.py"].chunks
        assert [c.split("class ", 1)[1].split("(", 1)[0] for c in chunks] == names

    def test_input_object_reported(self, blog_schema, blog_config, caplog):
        generator = CodeGenerator(blog_schema, blog_config)
        with caplog.at_level(logging.INFO, logger="gql_typegen"):
            generator.generate()
        assert [t.name for t in generator.skipped] == ["PostFilter"]
        assert "SKIP INPUT_OBJECT PostFilter" in caplog.text

    def test_generate_is_idempotent(self, blog_schema, blog_config):
        generator = CodeGenerator(blog_schema, blog_config)
        first = len(generator.generate()["types.py"].chunks)
        assert len(generator.generate()["types.py"].chunks) == first

    def test_pre_hooks(self, blog_schema, blog_config):
        hooks = HookRunner()
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix="Bot"))
        files = CodeGenerator(blog_schema, blog_config, hooks=hooks).generate()
        assert not any("class Bot(" in c for c in files["types.py"].chunks)

    def test_unconfigured_scalar_is_fatal(self, blog_schema):
        with pytest.raises(ScalarConfigError) as exc_info:
            CodeGenerator(blog_schema, Config()).generate()
        assert exc_info.value.scalar_name == "DateTime"

    def test_nameless_type_is_fatal(self):
        schema = Schema(types=[SchemaType(kind=TypeKind.OBJECT)])
        with pytest.raises(MalformedSchemaError):
            CodeGenerator(schema).generate()

    def test_scalar_file_override(self, blog_schema):
        config = Config.model_validate(
            {"scalars": {"DateTime": {"type": "str", "file": "time/scalars.py"}}}
        )
        sink = MemorySink()
        CodeGenerator(blog_schema, config).write(sink)
        assert 'DateTime = NewType("DateTime", str)' in sink.files["time/scalars.py"]
        assert "from .time.scalars import DateTime" in sink.files["types.py"]

    def test_member_collision_is_fatal(self):
        schema = parse_schema(introspect_sdl("type Query { fooBar: String foo_bar: String }"))
        with pytest.raises(MalformedSchemaError):
            CodeGenerator(schema).generate()


# =============================================================================
# Tests: Naming
# =============================================================================


NAMING_SDL = """
type Field {
  name: String
}

type Thing {
  list: String
  int: Int
  tags: [String]
  count: Int
  field: Field
}

type Query {
  thing: Thing
}
"""


class TestGeneratedNaming:
    """Tests for schema names that clash with Python names."""

    def test_builtin_field_names(self, build_package):
        types = build_package(NAMING_SDL, {}, "naming_models")("types")
        thing = types.Thing.model_validate(
            {"list": "a", "int": 3, "tags": ["x", None], "count": 2, "field": {"name": "f"}}
        )
        assert thing.get_list() == "a"
        assert thing.list_ == "a"
        assert thing.get_int() == 3
        assert thing.get_tags() == ["x", None]
        assert thing.get_count() == 2

    def test_reserved_type_name(self, build_package):
        types = build_package(NAMING_SDL, {}, "naming_models")("types")
        thing = types.Thing.model_validate({"field": {"name": "f"}})
        assert isinstance(thing.get_field(), types.Field_)
        assert thing.get_field().get_name() == "f"

    def test_round_trip(self, build_package):
        types = build_package(NAMING_SDL, {}, "naming_models")("types")
        thing = types.Thing.model_validate({"list": "a", "int": 3})
        assert types.Thing.model_validate(thing.model_dump(by_alias=True)) == thing


# =============================================================================
# Tests: Untyped Fallback
# =============================================================================


NODE_SDL = """
enum Status {
  OPEN
}

interface Node {
  owner: User
  peer: Node
  status: Status
}

type User implements Node {
  login: String
  owner: User
  peer: Node
  status: Status
}

type Query {
  node: Node
}
"""


class TestUntypedFallback:
    """Tests for accessors on payloads without a __typename."""

    @pytest.fixture
    def node_package(self, build_package):
        return build_package(NODE_SDL, {}, "node_models")

    def test_object_field_validated(self, node_package):
        interfaces = node_package("interfaces")
        types = node_package("types")
        node = interfaces.decode_node({"owner": {"login": "x"}})
        assert isinstance(node, interfaces.UntypedNode)
        assert isinstance(node.get_owner(), types.User)
        assert node.get_owner().get_login() == "x"

    def test_interface_field_decoded(self, node_package):
        interfaces = node_package("interfaces")
        types = node_package("types")
        node = interfaces.decode_node({"peer": {"__typename": "User", "login": "y"}})
        assert isinstance(node.get_peer(), types.User)
        assert node.get_peer().get_login() == "y"

    def test_interface_field_unknown_typename(self, node_package):
        interfaces = node_package("interfaces")
        node = interfaces.decode_node({"peer": {"__typename": "Robot"}})
        with pytest.raises(UnknownTypenameError):
            node.get_peer()

    def test_enum_and_missing_fields(self, node_package):
        interfaces = node_package("interfaces")
        node = interfaces.decode_node({"status": "OPEN"})
        assert node.get_status() == "OPEN"
        assert node.get_owner() is None


# =============================================================================
# Tests: Per-Object Files
# =============================================================================


SPLIT_SDL = """
type User {
  login: String
  posts: [Post]
}

type Post {
  title: String
  author: User
}

type Query {
  me: User
}
"""

SPLIT_CONFIG = {"types": {"User": {"file": "users.py"}, "Post": {"file": "posts.py"}}}


class TestObjectsInSeparateFiles:
    """Tests for objects that refer to each other across files."""

    @pytest.mark.parametrize("first", ["posts", "users", "types"])
    def test_importable_in_any_order(self, build_package, first):
        module = build_package(SPLIT_SDL, SPLIT_CONFIG, f"split_{first}")
        module(first)
        posts = module("posts")
        users = module("users")

        post = posts.Post.model_validate(
            {"title": "Hello", "author": {"login": "x", "posts": [{"title": "Earlier"}]}}
        )
        assert isinstance(post.get_author(), users.User)
        assert isinstance(post.get_author().get_posts()[0], posts.Post)

    def test_root_type_resolves_split_objects(self, build_package):
        module = build_package(SPLIT_SDL, SPLIT_CONFIG, "split_root")
        types = module("types")
        query = types.Query.model_validate({"me": {"login": "x"}})
        assert query.get_me().get_login() == "x"
        assert isinstance(query.get_me(), module("users").User)
