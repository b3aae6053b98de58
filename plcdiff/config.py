"""Settings of a conversion, optionally loaded from a YAML file."""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .interner import GUID_LENGTH
from .symbols import SYMBOL_LENGTH
from .xml_stream import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


@dataclass
class TextconvConfig:
    """Configuration of the textconv passes."""
    elide_tags: List[str] = field(default_factory=lambda: ["LadderElements"])
    identifier_format: str = "[{}]"
    context_attribute: str = "ctx"
    breadcrumb_separator: str = " > "
    edge_format: str = "{source}->[{edge}]->{target}"
    symbol_column: int = 0
    max_identifier_length: int = GUID_LENGTH
    max_symbol_length: int = SYMBOL_LENGTH
    xml_declaration: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE


def load_config(config_path: Optional[Union[str, Path]] = None) -> TextconvConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Optional path to a YAML file whose keys are the
            ``TextconvConfig`` field names, at the top level or under
            ``textconv``.

    Returns:
        The configuration; defaults when no path is given or the file
        cannot be parsed.
    """
    if config_path is None:
        return TextconvConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Could not load textconv config from {config_path}: {e}")
        return TextconvConfig()

    if not isinstance(config_data, dict):
        logger.warning(f"Ignoring textconv config {config_path}: expected a mapping")
        return TextconvConfig()

    section = config_data.get('textconv', config_data) or {}
    if not isinstance(section, dict):
        logger.warning(f"Ignoring textconv config {config_path}: expected a mapping")
        return TextconvConfig()

    defaults = TextconvConfig()
    settings = {}
    for key, value in section.items():
        if key not in {f.name for f in fields(TextconvConfig)}:
            logger.warning(f"Unknown textconv config key '{key}' in {config_path}")
        elif not _has_type_of(value, getattr(defaults, key)):
            logger.warning(
                f"Ignoring textconv config key '{key}' in {config_path}: "
                f"expected {type(getattr(defaults, key)).__name__}, got {value!r}"
            )
        else:
            settings[key] = value

    return TextconvConfig(**settings)


def _has_type_of(value, default) -> bool:
    # bool is a subclass of int, so compare exact types
    if type(value) is not type(default):
        return False
    if isinstance(default, list):
        return all(isinstance(item, str) for item in value)
    return True
