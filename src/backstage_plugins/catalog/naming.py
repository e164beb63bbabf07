# ABOUTME: Naming strategies turning Okta records into catalog entity names
# ABOUTME: Built-in strategies are selectable by tag; any callable can be used instead

"""
Naming strategies.

A naming strategy is any callable taking an Okta record and returning the
catalog entity name. The built-in ones can be picked from configuration by tag:

    Groups:
        "id"                    -> the Okta group id (default)
        "kebab-case-name"       -> kebab-cased group name
        "profile-field:<field>" -> value of a group profile field

    Users:
        "id"                    -> the Okta user id (default)
        "kebab-case-email"      -> kebab-cased email address
        "strip-domain-email"    -> email address without the domain

A strategy signals "this record cannot be named" by raising. The mapper
skips such records.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from backstage_plugins.okta.models import OktaGroup, OktaUser

GroupNamingStrategy: TypeAlias = "Callable[[OktaGroup], str]"
UserNamingStrategy: TypeAlias = "Callable[[OktaUser], str]"

PROFILE_FIELD_PREFIX = "profile-field:"

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def kebab_case(value: str) -> str:
    """'Everyone@the-company' -> 'everyone-the-company', 'someValue' -> 'some-value'."""
    return "-".join(word.lower() for word in _WORD.findall(value))


class IdGroupNamingStrategy:
    def __call__(self, group: OktaGroup) -> str:
        return group.id


class KebabCaseGroupNamingStrategy:
    def __call__(self, group: OktaGroup) -> str:
        name = group.profile.get("name")
        if not isinstance(name, str):
            raise ValueError(f"Group {group.id} has no name to kebab-case")
        return kebab_case(name)


class ProfileFieldGroupNamingStrategy:
    """Names a group after one of its profile fields, e.g. an org id."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name

    def __call__(self, group: OktaGroup) -> str:
        value = group.profile.get(self.field_name)
        if value is None:
            raise KeyError(f"Group {group.id} has no profile field {self.field_name!r}")
        return str(value)

    def __repr__(self) -> str:
        return f"ProfileFieldGroupNamingStrategy({self.field_name!r})"


class IdUserNamingStrategy:
    def __call__(self, user: OktaUser) -> str:
        return user.id


class KebabCaseEmailUserNamingStrategy:
    def __call__(self, user: OktaUser) -> str:
        if not user.email:
            raise ValueError(f"User {user.id} has no email address")
        return kebab_case(user.email)


class StripDomainEmailUserNamingStrategy:
    def __call__(self, user: OktaUser) -> str:
        if not user.email:
            raise ValueError(f"User {user.id} has no email address")
        return user.email.split("@", 1)[0]


GROUP_NAMING_STRATEGIES: dict[str, Callable[[], GroupNamingStrategy]] = {
    "id": IdGroupNamingStrategy,
    "kebab-case-name": KebabCaseGroupNamingStrategy,
}

USER_NAMING_STRATEGIES: dict[str, Callable[[], UserNamingStrategy]] = {
    "id": IdUserNamingStrategy,
    "kebab-case-email": KebabCaseEmailUserNamingStrategy,
    "strip-domain-email": StripDomainEmailUserNamingStrategy,
}


def resolve_group_naming_strategy(
    strategy: str | GroupNamingStrategy | None,
) -> GroupNamingStrategy:
    """
    Turn a configured group naming strategy into a callable.

    Args:
        strategy: A tag, a custom callable, or None for the default ("id").

    Raises:
        ValueError: If the tag is unknown.
    """
    if strategy is None:
        return IdGroupNamingStrategy()
    if callable(strategy):
        return strategy
    if strategy.startswith(PROFILE_FIELD_PREFIX):
        field_name = strategy[len(PROFILE_FIELD_PREFIX) :]
        if not field_name:
            raise ValueError("profile-field group naming strategy needs a field name")
        return ProfileFieldGroupNamingStrategy(field_name)
    if strategy not in GROUP_NAMING_STRATEGIES:
        raise ValueError(
            f"Unknown group naming strategy {strategy!r}. "
            f"Available: {[*GROUP_NAMING_STRATEGIES, PROFILE_FIELD_PREFIX + '<field>']}"
        )
    return GROUP_NAMING_STRATEGIES[strategy]()


def resolve_user_naming_strategy(
    strategy: str | UserNamingStrategy | None,
) -> UserNamingStrategy:
    """
    Turn a configured user naming strategy into a callable.

    Raises:
        ValueError: If the tag is unknown.
    """
    if strategy is None:
        return IdUserNamingStrategy()
    if callable(strategy):
        return strategy
    if strategy not in USER_NAMING_STRATEGIES:
        raise ValueError(
            f"Unknown user naming strategy {strategy!r}. Available: {list(USER_NAMING_STRATEGIES)}"
        )
    return USER_NAMING_STRATEGIES[strategy]()
