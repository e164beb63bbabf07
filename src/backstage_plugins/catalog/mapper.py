# ABOUTME: Maps Okta groups and users to catalog Group and User entities
# ABOUTME: Applies naming strategies, parent linkage, and per-record failure isolation

"""
Okta to catalog entity mapping.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

Given the current state of an Okta org, this module computes the complete
set of catalog entities describing it. There is no state between runs: the
same directory contents always map to the same entities (as long as the
naming strategies are pure), and the result replaces whatever the catalog
held before.

=============================================================================
FAILURE ISOLATION
=============================================================================

Naming strategies are user supplied and may raise. Each call is wrapped in a
NamingResult so a failure stays local to one record:

- A MEMBER that cannot be named is dropped from its group's member list. The
  group itself is still emitted.
- A GROUP that cannot be named is dropped entirely, members and all.

Either way a warning is logged and the run carries on with the next record.

=============================================================================
FIELD NORMALISATION
=============================================================================

    description: profile.description, or "" when it is null or missing
    parent:      profile[parent_group_field] when it is a string or a number
                 (numbers become their decimal string), otherwise no parent.
                 An empty string also means no parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from backstage_plugins.catalog.entities import EntityMetadata, GroupEntity, UserEntity
from backstage_plugins.catalog.naming import IdGroupNamingStrategy, IdUserNamingStrategy

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, Callable, Mapping

    from backstage_plugins.catalog.naming import GroupNamingStrategy, UserNamingStrategy
    from backstage_plugins.okta.models import OktaGroup, OktaUser, ProfileValue

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class NamingResult(Generic[T]):
    """Outcome of naming one record: either a name or the error that prevented it."""

    record: T
    name: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def apply_naming_strategy(strategy: Callable[[T], str], record: T) -> NamingResult[T]:
    """
    Name a record, capturing any failure instead of raising it.

    A strategy that returns something other than a non-empty string counts
    as a failure too.
    """
    try:
        name = strategy(record)
    except Exception as e:  # noqa: BLE001 - strategies are user supplied
        return NamingResult(record=record, error=e)
    if not isinstance(name, str) or not name:
        return NamingResult(
            record=record,
            error=ValueError(f"naming strategy returned {name!r}, expected a non-empty string"),
        )
    return NamingResult(record=record, name=name)


@dataclass(frozen=True)
class MappingConfig:
    """
    Options for mapping Okta records to catalog entities.

    Attributes:
        naming_strategy: Names groups. Defaults to the Okta group id.
        user_naming_strategy: Names users and group members. Defaults to the Okta user id.
        parent_group_field: Group profile field holding the parent group's name.
        include_empty_groups: Emit groups that end up with no members.
        annotations: Added to every entity's metadata.
    """

    naming_strategy: GroupNamingStrategy = field(default_factory=IdGroupNamingStrategy)
    user_naming_strategy: UserNamingStrategy = field(default_factory=IdUserNamingStrategy)
    parent_group_field: str | None = None
    include_empty_groups: bool = False
    annotations: Mapping[str, str] = field(default_factory=dict)


def parent_from_profile_value(value: ProfileValue) -> str | None:
    """
    Normalise a raw parent field value.

    Strings are kept, numbers become their decimal string (1234 -> "1234",
    integral floats lose the ".0"), anything else means no parent. An empty
    string is treated as no parent as well.
    """
    parent: str | None = None
    if isinstance(value, str):
        parent = value
    elif isinstance(value, int | float) and not isinstance(value, bool):
        parent = str(int(value)) if isinstance(value, float) and value.is_integer() else str(value)
    if parent == "":
        return None
    return parent


def group_entity_from_okta_group(
    group: OktaGroup,
    name: str,
    members: list[str],
    parent_group_field: str | None = None,
    annotations: Mapping[str, str] | None = None,
) -> GroupEntity:
    """Build the Group entity for an already named group."""
    parent = None
    if parent_group_field:
        parent = parent_from_profile_value(group.profile.get(parent_group_field))

    title = group.profile.get("name")
    description = group.profile.get("description") or ""
    return GroupEntity(
        metadata=EntityMetadata(
            name=name,
            title=title if isinstance(title, str) else None,
            description=description,
            annotations=dict(annotations or {}),
        ),
        members=members,
        parent=parent,
    )


def user_entity_from_okta_user(
    user: OktaUser,
    name: str,
    annotations: Mapping[str, str] | None = None,
) -> UserEntity:
    """Build the User entity for an already named user."""
    return UserEntity(
        metadata=EntityMetadata(
            name=name,
            title=user.email,
            annotations=dict(annotations or {}),
        ),
        email=user.email,
        display_name=user.display_name,
    )


async def resolve_members(group: OktaGroup, user_naming_strategy: UserNamingStrategy) -> list[str]:
    """Name every member of a group, in enumeration order, skipping members that fail."""
    members: list[str] = []
    async for user in group.list_users():
        result = apply_naming_strategy(user_naming_strategy, user)
        if not result.ok:
            logger.warning(
                "Skipping group member, user naming strategy failed",
                group=group.id,
                user=user.id,
                error=str(result.error),
            )
            continue
        members.append(result.name)
    return members


async def build_group_entities(
    groups: AsyncIterable[OktaGroup],
    config: MappingConfig | None = None,
) -> list[GroupEntity]:
    """
    Map Okta groups to catalog Group entities.

    Groups are processed one at a time in enumeration order. Each group's
    members are enumerated lazily when the group is reached.

    Args:
        groups: Groups to map, typically OktaClient.list_groups().
        config: Mapping options. Defaults to MappingConfig().

    Returns:
        One entity per group that could be named and, unless
        include_empty_groups is set, has at least one member.
    """
    config = config or MappingConfig()
    entities: list[GroupEntity] = []
    skipped = 0

    async for group in groups:
        members = await resolve_members(group, config.user_naming_strategy)

        result = apply_naming_strategy(config.naming_strategy, group)
        if not result.ok:
            logger.warning(
                "Skipping group, group naming strategy failed",
                group=group.id,
                error=str(result.error),
            )
            skipped += 1
            continue

        if not members and not config.include_empty_groups:
            logger.debug("Skipping group without members", group=group.id, name=result.name)
            continue

        entities.append(
            group_entity_from_okta_group(
                group,
                result.name,
                members,
                parent_group_field=config.parent_group_field,
                annotations=config.annotations,
            )
        )

    logger.info("Mapped Okta groups", entities=len(entities), failed=skipped)
    return entities


async def build_user_entities(
    users: AsyncIterable[OktaUser],
    config: MappingConfig | None = None,
) -> list[UserEntity]:
    """Map Okta users to catalog User entities, skipping users that cannot be named."""
    config = config or MappingConfig()
    entities: list[UserEntity] = []
    skipped = 0

    async for user in users:
        result = apply_naming_strategy(config.user_naming_strategy, user)
        if not result.ok:
            logger.warning("Skipping user, user naming strategy failed", user=user.id, error=str(result.error))
            skipped += 1
            continue
        entities.append(user_entity_from_okta_user(user, result.name, annotations=config.annotations))

    logger.info("Mapped Okta users", entities=len(entities), failed=skipped)
    return entities
