"""Pydantic models for the model catalog.

The catalog is loaded from config/models.yaml and lists every model a caller
may pass to PersonaEngine.init_model.
"""

from pydantic import BaseModel, Field


class ModelDefinition(BaseModel):
    """A selectable chat model.

    Attributes:
        id: Catalog identifier (e.g., "Llama-3.1-8B-Instruct-q4f32_1-MLC").
        name: Display name.
        size: Human-readable download size.
        description: Short description for model pickers.
        backend_model: Name of the same model on the local Ollama service. Models
            without one can only run on backends that understand the catalog id.
    """

    id: str = Field(..., min_length=1, description="Catalog model identifier")
    name: str = Field(..., description="Display name")
    size: str = Field(default="", description="Approximate download size")
    description: str = Field(default="", description="Short description")
    backend_model: str | None = Field(default=None, description="Ollama model name")


class ModelCatalog(BaseModel):
    """Complete model catalog as loaded from config/models.yaml."""

    models: list[ModelDefinition] = Field(default_factory=list)

    def get(self, model_id: str) -> ModelDefinition | None:
        """Return the definition for model_id, or None if it is not listed."""
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def ids(self) -> list[str]:
        """Return all catalog ids in file order."""
        return [model.id for model in self.models]
