"""
CLI utilities for command line reconstruction and input loading.
"""

import json
from pathlib import Path

import click
import yaml

PROGRAM_NAME = "openapi_to_code"

YAML_SUFFIXES = {".yaml", ".yml"}


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the command line from the current Click context.

    File paths are shortened to their file names so the generated header
    does not depend on the machine the generator ran on.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM_NAME

    cli_args = ctx.params
    if not cli_args:
        return PROGRAM_NAME

    arguments = []
    options = []

    for param in click_command.params:
        if param.name not in cli_args:
            continue

        value = cli_args[param.name]
        if value is None or value is False or value == "":
            continue

        if isinstance(param, click.Argument):
            arguments.append(Path(str(value)).name)
            continue

        if isinstance(param, click.Option):
            if value == param.default:
                continue

            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, _display_value(value)])

    return " ".join([PROGRAM_NAME, *arguments, *options])


def _display_value(value) -> str:
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    return str(value)


def load_document(path: str | Path) -> dict:
    """
    Load an OpenAPI or JSON Schema document.

    YAML is chosen by file suffix; everything else is read as JSON.

    Raises:
        click.ClickException: When the file cannot be decoded
    """
    path = Path(path)
    with open(path) as f:
        try:
            if path.suffix.lower() in YAML_SUFFIXES:
                return yaml.safe_load(f)
            return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise click.ClickException(f"Could not decode {path.name}: {e}") from e
