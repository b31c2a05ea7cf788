"""Command-line interface for gql-typegen."""

import json
from pathlib import Path

import click

from .core.config import load_config
from .core.errors import GenerationError
from .core.generator import DEFAULT_PACKAGE, CodeGenerator
from .core.hooks import AddHeaderHook, FilterTypesHook, HookRunner
from .core.introspection import GraphQLError, fetch_introspection, load_schema_document
from .core.output import DirectorySink
from .logger import configure_logging


@click.group()
@click.version_option(package_name="gql-typegen")
def main():
    """Typed Python models from GraphQL introspection.

    Generate pydantic models, Protocols and polymorphic decoders from an
    introspected GraphQL schema.
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Introspection result (.json) or SDL file (.graphql, .graphqls).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with scalar and type overrides.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False),
    help="Directory in which the generated package is created.",
)
@click.option(
    "--package",
    "-p",
    default=DEFAULT_PACKAGE,
    show_default=True,
    help="Name of the generated package.",
)
@click.option(
    "--exclude-prefix",
    help="Skip types whose name starts with this prefix.",
)
@click.option(
    "--header",
    help="Text prepended to every generated file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(schema: str, config_path: str | None, output: str, package: str,
             exclude_prefix: str | None, header: str | None, verbose: bool):
    """Generate Python models from a GraphQL schema.

    Examples:

        gql-typegen generate --schema ./schema.json --output ./src

        gql-typegen generate -s ./schema.graphqls -c ./config.json -o ./src -p github
    """
    configure_logging(verbose)

    hooks = HookRunner()
    if exclude_prefix:
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix=exclude_prefix))
    if header:
        hooks.add_post_hook(AddHeaderHook(header))

    output_path = Path(output).resolve()
    if verbose:
        click.echo(f"Schema: {schema}")
        click.echo(f"Output: {output_path / package}")

    click.echo("Loading schema...")
    document = load_schema_document(schema)
    config = load_config(config_path)

    if verbose:
        click.echo(f"  Types: {len(document.types)}")
        click.echo(f"  Scalar overrides: {len(config.scalars)}")
        click.echo(f"  Type overrides: {len(config.types)}")

    click.echo("Generating code...")
    generator = CodeGenerator(document, config, package=package, hooks=hooks)
    try:
        files = generator.write(DirectorySink(output_path, hooks=hooks))
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        for file, of in files.items():
            click.echo(f"  {file}: {len(of.chunks)} declarations")
    click.echo(f"Done! Generated {len(files)} files in {output_path / package}")


@main.command()
@click.option(
    "--url",
    "-u",
    required=True,
    help="GraphQL endpoint URL.",
)
@click.option(
    "--header-field",
    "-H",
    "header_fields",
    multiple=True,
    help='Request header as "Name: value". May be repeated.',
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="File to write the introspection result to.",
)
def introspect(url: str, header_fields: tuple[str, ...], output: str):
    """Fetch the introspection result of a live endpoint.

    Examples:

        gql-typegen introspect -u https://api.github.com/graphql \\
            -H "Authorization: bearer $GITHUB_TOKEN" -o schema.json
    """
    headers = {}
    for header_field in header_fields:
        name, sep, value = header_field.partition(":")
        if not sep:
            raise click.BadParameter(f"expected 'Name: value', got {header_field!r}",
                                     param_hint="--header-field")
        headers[name.strip()] = value.strip()

    click.echo(f"Introspecting {url}...")
    try:
        data = fetch_introspection(url, headers=headers)
    except GraphQLError as e:
        raise click.ClickException(e.message) from e

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump({"data": data}, f, indent=2)
    click.echo(f"Output: {output_path}")


if __name__ == "__main__":
    main()
