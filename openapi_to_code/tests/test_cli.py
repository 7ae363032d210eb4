#!/usr/bin/env python3

import json

import pytest
from click.testing import CliRunner

from openapi_to_code.openapi_to_code import openapi_to_code

PETSTORE = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "description": "A pet",
                "required": ["id"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            }
        }
    },
}

PETSTORE_YAML = """\
openapi: 3.0.3
info:
  title: Petstore
  version: 1.0.0
components:
  schemas:
    Pet:
      type: object
      description: A pet
      required: [id]
      properties:
        id:
          type: integer
          format: int64
        tags:
          type: array
          items:
            type: string
"""


@pytest.fixture
def petstore_json(tmp_path):
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(PETSTORE))
    return path


@pytest.fixture
def petstore_yaml(tmp_path):
    path = tmp_path / "petstore.yaml"
    path.write_text(PETSTORE_YAML)
    return path


def test_generate_to_file(petstore_json, tmp_path):
    output = tmp_path / "Models.cs"
    result = CliRunner().invoke(openapi_to_code, [str(petstore_json), str(output)])

    assert result.exit_code == 0, result.output
    code = output.read_text()
    assert "namespace GeneratedModels;" in code
    assert "public record Pet\n{\n" in code
    assert "    public required long Id { get; init; }\n" in code
    assert "    public IReadOnlyList<string>? Tags { get; init; }\n" in code


def test_generate_yaml_to_stdout(petstore_yaml):
    result = CliRunner().invoke(openapi_to_code, [str(petstore_yaml), "--namespace", "Pets"])

    assert result.exit_code == 0, result.output
    assert "//     openapi_to_code petstore.yaml --namespace Pets\n" in result.output
    assert "namespace Pets;" in result.output
    assert "/// A pet" in result.output


def test_json_and_yaml_inputs_agree(petstore_json, petstore_yaml):
    from_json = CliRunner().invoke(openapi_to_code, [str(petstore_json), "--no-header"])
    from_yaml = CliRunner().invoke(openapi_to_code, [str(petstore_yaml), "--no-header"])

    assert from_json.exit_code == 0
    assert from_yaml.exit_code == 0
    assert from_json.output == from_yaml.output


def test_config_file(petstore_json, tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"namespace": "FromConfig", "generate_doc_comments": False}))

    result = CliRunner().invoke(openapi_to_code, [str(petstore_json), "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "namespace FromConfig;" in result.output
    assert "<summary>" not in result.output
    assert "--config config.json" in result.output


def test_namespace_flag_overrides_config_file(petstore_json, tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"namespace": "FromConfig"}))

    result = CliRunner().invoke(openapi_to_code, [str(petstore_json), "-c", str(config_file), "-n", "FromFlag"])

    assert result.exit_code == 0, result.output
    assert "namespace FromFlag;" in result.output
    assert "namespace FromConfig;" not in result.output


def test_flags(petstore_json):
    result = CliRunner().invoke(
        openapi_to_code, [str(petstore_json), "--no-header", "--no-doc-comments", "--mutable-arrays"]
    )

    assert result.exit_code == 0, result.output
    assert result.output.startswith("#nullable enable\n")
    assert "<summary>" not in result.output
    assert "public List<string>? Tags { get; init; }" in result.output


def test_name_style(petstore_json):
    result = CliRunner().invoke(openapi_to_code, [str(petstore_json), "--no-header", "--name-style", "snake"])

    assert result.exit_code == 0, result.output
    assert "public record pet\n" in result.output
    assert "public required long id { get; init; }" in result.output


def test_invalid_name_style(petstore_json):
    result = CliRunner().invoke(openapi_to_code, [str(petstore_json), "--name-style", "kebab"])
    assert result.exit_code == 2


def test_missing_input(tmp_path):
    result = CliRunner().invoke(openapi_to_code, [str(tmp_path / "missing.json")])
    assert result.exit_code == 2


def test_undecodable_input(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    result = CliRunner().invoke(openapi_to_code, [str(path)])

    assert result.exit_code == 1
    assert "Error: Could not decode broken.json" in result.output


def test_invalid_document(tmp_path):
    path = tmp_path / "list.json"
    path.write_text(json.dumps(["not", "a", "document"]))

    result = CliRunner().invoke(openapi_to_code, [str(path)])

    assert result.exit_code == 1
    assert "Error" in result.output


if __name__ == "__main__":
    pytest.main([__file__])
