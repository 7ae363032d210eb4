import json
import logging
import sys

import click

from .cli_utils import load_document, reconstruct_command_line
from .pipeline import CodeGenerationError, GeneratorConfig, NameStyle, PipelineGenerator

logger = logging.getLogger(__name__)


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--namespace", "-n", default=None, type=str, help="C# namespace of the generated file")
@click.option(
    "--name-style",
    default=None,
    type=click.Choice([style.value for style in NameStyle]),
    help="Identifier casing for generated names",
)
@click.option("--no-doc-comments", is_flag=True, default=False, help="Omit /// <summary> comments")
@click.option("--no-header", is_flag=True, default=False, help="Omit the <auto-generated> header")
@click.option(
    "--no-default-non-nullable",
    is_flag=True,
    default=False,
    help="Keep optional properties nullable even when they carry a default",
)
@click.option(
    "--no-add-default-values",
    is_flag=True,
    default=False,
    help="Emit the default! placeholder instead of schema default values",
)
@click.option("--mutable-arrays", is_flag=True, default=False, help="Use List<T> instead of IReadOnlyList<T>")
@click.option(
    "--mutable-dictionaries",
    is_flag=True,
    default=False,
    help="Use Dictionary<string, T> instead of IReadOnlyDictionary<string, T>",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def openapi_to_code(
    config,
    namespace,
    name_style,
    no_doc_comments,
    no_header,
    no_default_non_nullable,
    no_add_default_values,
    mutable_arrays,
    mutable_dictionaries,
    verbose,
    path,
    output,
):
    """Generate C# declarations from the schemas of an OpenAPI document at PATH."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    document = load_document(path)

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flags override the config file
    if namespace is not None:
        config.namespace = namespace
    if name_style is not None:
        config.name_style = NameStyle(name_style)
    if no_doc_comments:
        config.generate_doc_comments = False
    if no_header:
        config.generate_file_header = False
    if no_default_non_nullable:
        config.default_non_nullable = False
    if no_add_default_values:
        config.add_default_values = False
    if mutable_arrays:
        config.immutable_arrays = False
    if mutable_dictionaries:
        config.immutable_dictionaries = False

    generation_comment = reconstruct_command_line(openapi_to_code)
    codegen = PipelineGenerator(document, config, generation_comment)

    try:
        out = codegen.generate()
    except CodeGenerationError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(out, nl=False)
        return

    with open(output, "w") as f:
        f.write(out)
    logger.info("Wrote %s", output)
