"""Base model configuration for validated harness data."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that tolerates unknown keys in external documents."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
