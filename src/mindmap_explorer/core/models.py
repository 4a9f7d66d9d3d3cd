"""Data models shared by the hierarchy, layout and rendering layers.

``NodeRecord`` is the validated input shape produced by dataset parsing.
Geometry types are NamedTuples so the animator can interpolate them field
by field.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

NodeId = int | str


class Point(NamedTuple):
    """Logical layout coordinate."""

    x: float
    y: float


class EdgeGeometry(NamedTuple):
    """Endpoints of a parent→child edge."""

    source: Point
    target: Point


class NodeRecord(BaseModel):
    """One node of an input hierarchy.

    Accepts the field names used by the published datasets (``name``,
    ``description``, ``id``) as well as the canonical ones.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    label: str = Field(
        ...,
        validation_alias=AliasChoices("label", "name"),
        description="Display name",
    )
    annotation: str | None = Field(
        default=None,
        validation_alias=AliasChoices("annotation", "description"),
        description="Rich-text body shown in the detail view",
    )
    link: str | None = Field(default=None, description="External reference URL")
    identity: int | str | None = Field(
        default=None,
        validation_alias=AliasChoices("identity", "id"),
        description="Source-provided identity hint",
    )
    children: list[NodeRecord] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _none_is_leaf(cls, value: object) -> object:
        return [] if value is None else value


class FlatRecord(BaseModel):
    """One row of a flat, parent-referencing dataset."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    identity: int | str = Field(..., validation_alias=AliasChoices("identity", "id"))
    parent: int | str | None = Field(
        default=None, validation_alias=AliasChoices("parent", "parent_id")
    )
    label: str = Field(..., validation_alias=AliasChoices("label", "name"))
    annotation: str | None = Field(
        default=None, validation_alias=AliasChoices("annotation", "description")
    )
    link: str | None = None
