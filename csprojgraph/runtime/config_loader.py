"""Read ``--config`` values into a :class:`ResolverConfig`.

The value is either a path to a ``.toml``/``.json`` file or the settings
themselves as inline TOML or JSON text. Inline text starting with ``{`` is
JSON, anything else is TOML.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Optional, Union

from csprojgraph.config.schema import ResolverConfig

logger = logging.getLogger("csprojgraph.runtime.config_loader")


def _parse(text: str, is_json: bool) -> dict:
    data = json.loads(text) if is_json else tomllib.loads(text)
    if not isinstance(data, dict):
        raise ValueError("resolver configuration must be a table of sections")
    return data


def load_resolver_config(source: Optional[Union[str, Path]]) -> ResolverConfig:
    """Build the resolver configuration for one ``--config`` value.

    ``None`` gives the defaults.

    Raises:
        ValueError: If the text is not valid TOML/JSON or not a table.
        pydantic.ValidationError: If a setting is invalid.
    """
    if source is None:
        return ResolverConfig.default()

    if os.path.isfile(source):
        path = Path(source)
        logger.info("Loading resolver configuration from %s", path)
        text = path.read_text(encoding="utf-8")
        is_json = path.suffix.lower() == ".json"
    else:
        text = str(source)
        is_json = text.lstrip().startswith("{")
        logger.debug("Using inline resolver configuration")

    return ResolverConfig.from_dict(_parse(text, is_json))


__all__ = ["load_resolver_config"]
