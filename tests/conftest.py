"""Shared fixtures: a small petstore spec and scripted content producers."""

from __future__ import annotations

import copy
import json
import typing as typ
from pathlib import Path

import pytest

from specdocs.config import GeneratorConfig
from specdocs.models import SectionOutput

if typ.TYPE_CHECKING:
    from specdocs.models import DocPlan, Section

PETSTORE: dict[str, typ.Any] = {
    "openapi": "3.0.3",
    "info": {
        "title": "Petstore",
        "version": "1.0.0",
        "description": "Manage pets and orders.",
    },
    "servers": [{"url": "https://api.example.com/v1"}],
    "tags": [
        {"name": "pets", "description": "Everything about pets"},
        {"name": "store", "description": "Orders"},
    ],
    "paths": {
        "/pets": {
            "get": {
                "tags": ["pets"],
                "summary": "List pets",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}}
                ],
                "responses": {
                    "200": {
                        "description": "A list of pets",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Pet"},
                                }
                            }
                        },
                    }
                },
            },
            "post": {
                "tags": ["pets"],
                "summary": "Create a pet",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Pet"}
                        }
                    }
                },
                "responses": {
                    "201": {"description": "Created"},
                    "400": {"$ref": "#/components/responses/BadRequest"},
                },
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {
                    "name": "petId",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string"},
                }
            ],
            "get": {
                "tags": ["pets"],
                "summary": "Get a pet",
                "responses": {
                    "200": {
                        "description": "A pet",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"}
                            }
                        },
                    },
                    "404": {"description": "Pet not found"},
                },
            },
        },
        "/orders": {
            "post": {
                "tags": ["store"],
                "summary": "Place an order",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Order"}
                        }
                    }
                },
                "responses": {"200": {"description": "Order placed"}},
            }
        },
        "/health": {
            "get": {
                "summary": "Health check",
                "responses": {"200": {"description": "OK"}},
            }
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "category": {"$ref": "#/components/schemas/Category"},
                },
            },
            "Category": {
                "type": "object",
                "properties": {"name": {"type": "string"}},
            },
            "Order": {
                "type": "object",
                "properties": {
                    "petId": {"type": "string"},
                    "quantity": {"type": "integer"},
                },
            },
            "Error": {
                "type": "object",
                "properties": {"message": {"type": "string"}},
            },
        },
        "responses": {
            "BadRequest": {
                "description": "Invalid input",
                "content": {
                    "application/json": {
                        "schema": {"$ref": "#/components/schemas/Error"}
                    }
                },
            }
        },
        "securitySchemes": {
            "api_key": {"type": "apiKey", "name": "X-API-Key", "in": "header"}
        },
    },
}


class RecordingWriter:
    """Writer that returns canned markdown and records which sections it saw."""

    def __init__(self, failing: typ.Collection[str] = ()) -> None:
        self.failing = set(failing)
        self.calls: list[str] = []

    def write(self, section: Section, plan: DocPlan) -> SectionOutput:  # noqa: ARG002
        self.calls.append(section.id)
        if section.id in self.failing:
            msg = f"writer exploded on {section.id}"
            raise RuntimeError(msg)
        return SectionOutput(
            title=section.title,
            markdown=f"Content for {section.id}.\n\n## Details\n\nMore about {section.title}.",
        )


@pytest.fixture
def petstore() -> dict[str, typ.Any]:
    """Return a fresh copy of the petstore document."""
    return copy.deepcopy(PETSTORE)


def write_spec(path: Path, document: typ.Mapping[str, typ.Any]) -> Path:
    """Write ``document`` as JSON to ``path`` and return it."""
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def spec_path(tmp_path: Path, petstore: dict[str, typ.Any]) -> Path:
    """Write the petstore document to disk."""
    return write_spec(tmp_path / "petstore.json", petstore)


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    return tmp_path / "docs"


@pytest.fixture
def generator_config(spec_path: Path, docs_dir: Path) -> GeneratorConfig:
    """Return a generator configuration pointing at the petstore spec."""
    return GeneratorConfig(spec=str(spec_path), output=docs_dir, planner="rules")


@pytest.fixture
def recording_writer() -> RecordingWriter:
    """Return a writer that succeeds for every section until told otherwise."""
    return RecordingWriter()
