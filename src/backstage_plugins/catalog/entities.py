# ABOUTME: Backstage catalog entity shapes produced by the Okta providers
# ABOUTME: Group and User entities plus the full mutation handed to the catalog

"""Catalog entities and mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

API_VERSION = "backstage.io/v1alpha1"

ANNOTATION_LOCATION = "backstage.io/managed-by-location"
ANNOTATION_ORIGIN_LOCATION = "backstage.io/managed-by-origin-location"


@dataclass
class EntityMetadata:
    name: str
    title: str | None = None
    description: str | None = None
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"annotations": dict(self.annotations), "name": self.name}
        if self.title is not None:
            data["title"] = self.title
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class GroupEntity:
    """
    A catalog Group.

    parent is None when the group has no parent; the key is then left out of
    the serialized spec rather than written as null or an empty string.
    """

    metadata: EntityMetadata
    members: list[str] = field(default_factory=list)
    parent: str | None = None
    children: list[str] = field(default_factory=list)
    type: str = "group"
    kind: Literal["Group"] = "Group"
    api_version: str = API_VERSION

    def to_dict(self) -> dict[str, Any]:
        spec: dict[str, Any] = {
            "members": list(self.members),
            "type": self.type,
            "children": list(self.children),
        }
        if self.parent is not None:
            spec["parent"] = self.parent
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "metadata": self.metadata.to_dict(),
            "spec": spec,
        }


@dataclass
class UserEntity:
    metadata: EntityMetadata
    email: str | None = None
    display_name: str | None = None
    member_of: list[str] = field(default_factory=list)
    kind: Literal["User"] = "User"
    api_version: str = API_VERSION

    def to_dict(self) -> dict[str, Any]:
        profile: dict[str, Any] = {}
        if self.display_name is not None:
            profile["displayName"] = self.display_name
        if self.email is not None:
            profile["email"] = self.email
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "metadata": self.metadata.to_dict(),
            "spec": {"profile": profile, "memberOf": list(self.member_of)},
        }


Entity = GroupEntity | UserEntity


@dataclass
class DeferredEntity:
    entity: Entity
    location_key: str

    def to_dict(self) -> dict[str, Any]:
        return {"entity": self.entity.to_dict(), "locationKey": self.location_key}


@dataclass
class EntityMutation:
    """A full replacement of every entity previously emitted by one provider."""

    entities: list[DeferredEntity] = field(default_factory=list)
    type: Literal["full"] = "full"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "entities": [e.to_dict() for e in self.entities]}
