"""Base model for all mpybox Pydantic models.

This module provides a base model class that enforces consistent serialization
behavior across all mpybox models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class MpyboxBaseModel(BaseModel):
    """Base model class for all mpybox Pydantic models.

    Serialization goes through ``to_dict`` so every model is dumped with
    aliases and JSON-compatible values.
    """

    model_config = ConfigDict(
        # Strip whitespace from string fields
        str_strip_whitespace=True,
        # Validate assignment after model creation
        validate_assignment=True,
        # Accept both field names and aliases on input
        populate_by_name=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary with consistent serialization parameters.

        Returns:
            Dictionary representation using JSON-compatible serialization
        """
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")

    def to_dict_full(self) -> dict[str, Any]:
        """Convert model to dictionary including all fields (even unset ones)."""
        return self.model_dump(by_alias=True, exclude_unset=False, mode="json")
