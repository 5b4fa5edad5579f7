"""Request/response schemas for tree node endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.tree_node import NAME_MAX_LENGTH

# Id of the synthetic wrapper returned when a whole forest is requested.
SYNTHETIC_ROOT_ID = "00000000-0000-0000-0000-000000000000"
SYNTHETIC_ROOT_NAME = "Root"

DESCRIPTION_MAX_LENGTH = 4_000


def _strip_name(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        raise ValueError("name must not be blank")
    return stripped


class CreateTreeNodeRequest(BaseModel):
    """Body for creating a node. Omit parent_id (or send null) to create a root."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Node name")
    description: str | None = Field(
        default=None, max_length=DESCRIPTION_MAX_LENGTH, description="Free-text description"
    )
    parent_id: str | None = Field(default=None, description="Id of the parent node")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_name(v)


class UpdateTreeNodeRequest(BaseModel):
    """
    Partial update. Only fields present in the body are applied.

    parent_id: omitted keeps the current parent; explicit null moves the node to the root.
    """

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    parent_id: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _strip_name(v)

    @property
    def parent_id_set(self) -> bool:
        """True when the client sent parent_id, including an explicit null."""
        return "parent_id" in self.model_fields_set


class TreeNodeDto(BaseModel):
    """Node view returned by the API; children is filled only by tree endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    parent_id: str | None = None
    path: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    children: list["TreeNodeDto"] = Field(default_factory=list)


class TreeNodeExport(TreeNodeDto):
    """TreeNodeDto with camelCase aliases, used for the JSON export file."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    children: list["TreeNodeExport"] = Field(default_factory=list)
