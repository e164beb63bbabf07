# ABOUTME: Okta directory records used by the catalog entity providers
# ABOUTME: Groups carry a lazy, single-pass enumeration of their member users

"""Okta user and group records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

ProfileValue = str | int | float | bool | None


@dataclass
class OktaUser:
    """An Okta user. Only the fields the catalog needs are lifted out of the profile."""

    id: str
    profile: dict[str, Any] = field(default_factory=dict)
    status: str | None = None

    @property
    def email(self) -> str | None:
        return self.profile.get("email")

    @property
    def display_name(self) -> str | None:
        return self.profile.get("displayName")

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> OktaUser:
        return cls(
            id=data.get("id", ""),
            profile=data.get("profile") or {},
            status=data.get("status"),
        )


async def _no_members() -> AsyncIterator[OktaUser]:
    return
    yield


@dataclass
class OktaGroup:
    """
    An Okta group.

    Members are not fetched up front. list_users() starts a new enumeration
    each time it is called; against the live API that means a new query.
    """

    id: str
    profile: dict[str, ProfileValue] = field(default_factory=dict)
    members: Callable[[], AsyncIterator[OktaUser]] = field(default=_no_members, repr=False)

    @property
    def name(self) -> str | None:
        value = self.profile.get("name")
        return value if isinstance(value, str) else None

    def list_users(self) -> AsyncIterator[OktaUser]:
        return self.members()

    @classmethod
    def from_api_response(
        cls,
        data: dict[str, Any],
        members: Callable[[], AsyncIterator[OktaUser]] | None = None,
    ) -> OktaGroup:
        return cls(
            id=data.get("id", ""),
            profile=data.get("profile") or {},
            members=members or _no_members,
        )
