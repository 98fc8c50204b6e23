# yaml_parser.py
import logging
from typing import Any

import yaml
from pydantic import ValidationError

from models.letter_models import LetterDraft

logger = logging.getLogger(__name__)


def normalize_keys_recursive(data: Any) -> Any:
    """
    Recursively normalizes keys in a dictionary to lowercase and replaces spaces with underscores,
    so "Send Date" and "send_date" are read the same way.
    """
    if isinstance(data, dict):
        return {
            str(key).strip().lower().replace(" ", "_"): normalize_keys_recursive(value)
            for key, value in data.items()
        }
    elif isinstance(data, list):
        return [normalize_keys_recursive(item) for item in data]
    else:
        return data


def load_yaml_file(filepath: str, normalize_keys: bool = True) -> dict[str, Any] | None:
    """
    Loads and parses a YAML file.

    Args:
        filepath: Path to the YAML file.
        normalize_keys: Whether to recursively normalize dictionary keys
                        (lowercase, spaces to underscores). Defaults to True.

    Returns:
        A dictionary representing the YAML content, or None if an error occurs.
    """
    if not filepath.endswith((".yaml", ".yml")):
        logger.error(f"File specified is not a YAML file: {filepath}")
        return None
    try:
        with open(filepath, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"YAML file '{filepath}' not found.")
        return None
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file {filepath}: {e}", exc_info=True)
        return None

    if content is None:  # Empty file
        return {}
    if not isinstance(content, dict):
        logger.error(
            f"YAML file {filepath} must have a dictionary as its root element. Parsed type: {type(content)}"
        )
        return None

    if normalize_keys:
        return normalize_keys_recursive(content)
    return content


def load_letter_draft(filepath: str) -> LetterDraft | None:
    """Read a letter draft (title, goal, content, send_date) from YAML."""
    data = load_yaml_file(filepath)
    if data is None:
        return None
    fields = {key: data[key] for key in LetterDraft.model_fields if key in data}
    for key in ("title", "goal", "content"):
        if fields.get(key) is None:
            fields.pop(key, None)
        else:
            fields[key] = str(fields[key])
    try:
        return LetterDraft(**fields)
    except ValidationError as e:
        logger.error(f"Invalid letter draft in {filepath}: {e}")
        return None
