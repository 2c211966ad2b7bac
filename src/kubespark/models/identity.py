"""Models for the identity of the submitting user."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["Identity", "UserGroup"]


class UserGroup(BaseModel):
    """A single POSIX group of the submitting user."""

    model_config = ConfigDict(frozen=True)

    name: Annotated[
        str,
        Field(
            title="Group name",
            examples=["spark"],
        ),
    ]

    id: Annotated[
        str,
        Field(
            title="Numeric GID of the group",
            description="Kept as a string since it is only used in env vars",
            examples=["1000"],
        ),
    ]


class Identity(BaseModel):
    """User the driver process runs as.

    Nothing here is validated beyond the types. Empty values are legal so
    that a resolver can report what it found, and the driver step decides
    whether the result is usable.
    """

    model_config = ConfigDict(frozen=True)

    username: Annotated[
        str,
        Field(title="User name", examples=["mapr"]),
    ]

    uid: Annotated[
        str,
        Field(title="Numeric UID", examples=["5000"]),
    ] = ""

    groups: Annotated[
        list[UserGroup],
        Field(
            title="Primary and supplementary groups",
            description="Primary group first, followed by the others",
        ),
    ] = []

    @property
    def group_names(self) -> list[str]:
        """Names of the user's groups that have a GID, in order."""
        return [g.name for g in self.groups if g.id]

    @property
    def group_ids(self) -> list[str]:
        """GIDs of the user's groups, in order, skipping empty ones."""
        return [g.id for g in self.groups if g.id]
