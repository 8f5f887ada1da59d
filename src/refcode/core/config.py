"""Series configuration loading for refcode.

A series file is YAML with a top-level ``series`` mapping::

    series:
      invoices:
        prefix: INV
        separator: "-"
        timezone: Asia/Bangkok
      shipments:
        prefix: SHP
        date_format: "%y%m%d"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from refcode.core.errors import ConfigurationError
from refcode.core.models import GeneratorConfig

logger = logging.getLogger(__name__)


def load_series_config(path: Path) -> dict[str, GeneratorConfig]:
    """Load every series defined in *path*.

    Returns an empty dict if the file doesn't exist.
    """
    if not path.exists():
        logger.debug("No series config found at %s; using defaults", path)
        return {}

    logger.info("Loading series config from %s", path)
    with path.open() as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        logger.warning("%s did not contain a mapping; no series loaded", path.name)
        return {}

    series = data.get("series", {})
    if not isinstance(series, dict):
        logger.warning("'series' key is not a mapping; ignoring")
        return {}

    configs: dict[str, GeneratorConfig] = {}
    for name, options in series.items():
        if not isinstance(options, dict):
            logger.warning("Series %r is not a mapping; skipping", name)
            continue
        configs[str(name)] = make_generator_config(options)
    return configs


def make_generator_config(options: dict[str, Any]) -> GeneratorConfig:
    """Build a GeneratorConfig from a mapping of options.

    Only fields present in *options* override the defaults defined in
    :class:`GeneratorConfig`.
    """
    # Filter to only the fields GeneratorConfig actually declares so that
    # unknown keys don't cause a validation error.
    valid_fields = GeneratorConfig.model_fields
    filtered = {k: v for k, v in options.items() if k in valid_fields}

    if dropped := set(options) - set(filtered):
        logger.warning("Ignoring unknown series config keys: %s", sorted(dropped))

    try:
        return GeneratorConfig(**filtered)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
