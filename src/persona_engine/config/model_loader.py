"""Load and validate the model catalog from a YAML file.

This module provides the entry point for loading the model catalog:
- Loads config/models.yaml
- Validates against the Pydantic schema
- Returns a typed ModelCatalog object
"""

from pathlib import Path

import structlog
from pydantic import ValidationError

from persona_engine.config.loader import ConfigLoadError, load_yaml_file
from persona_engine.llm_client.models import ModelCatalog

log = structlog.get_logger(__name__)


class ModelConfigError(ConfigLoadError):
    """Raised when the model catalog cannot be loaded or is invalid."""

    pass


def load_model_catalog(config_path: Path | str | None = None) -> ModelCatalog:
    """Load and validate the model catalog.

    Args:
        config_path: Path to models.yaml. If None, uses settings.model_config_path.

    Returns:
        Validated ModelCatalog.

    Raises:
        ModelConfigError: If the catalog cannot be loaded, parsed, or validated.

    Example:
        >>> from persona_engine.config import load_model_catalog
        >>> catalog = load_model_catalog()
        >>> catalog.get("TinyLlama-1.1B-Chat-v0.4-q4f32_1-MLC").backend_model
        'tinyllama'
    """
    if config_path is None:
        from persona_engine.config.settings import get_settings  # noqa: PLC0415

        config_path = get_settings().model_config_path
    config_path = Path(config_path)

    if not config_path.is_file():
        raise ModelConfigError(f"Model catalog file not found: {config_path}")

    content = load_yaml_file(config_path, error_class=ModelConfigError)
    if not content:
        log.warning("model_catalog_empty", config_path=str(config_path))
        return ModelCatalog(models=[])

    try:
        catalog = ModelCatalog.model_validate(content)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            error_messages.append(f"{field_path}: {error['msg']}")
        error_summary = "\n".join(error_messages)
        raise ModelConfigError(f"Model catalog validation failed:\n{error_summary}") from None

    duplicates = {model_id for model_id in catalog.ids() if catalog.ids().count(model_id) > 1}
    if duplicates:
        raise ModelConfigError(f"Duplicate model ids in catalog: {sorted(duplicates)}")

    log.debug("model_catalog_loaded", models_count=len(catalog.models))
    return catalog
