"""JSON formatter for CLI output."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from rich.console import Console


def format_json(console: Console, model: BaseModel) -> None:
    """Display any result model as JSON."""
    console.print_json(model.model_dump_json(indent=2))


def export_json(model: BaseModel, path: Path) -> None:
    """Write a result model to a JSON file."""
    with open(path, "w") as f:
        json.dump(to_dict(model), f, indent=2, default=str)


def to_dict(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json")
