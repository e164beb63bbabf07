# ABOUTME: Okta entity providers feeding users and groups into the software catalog
# ABOUTME: Each run maps the whole directory and applies a single full mutation

"""
Okta entity providers.

Three providers share the same life cycle:

    provider = OktaOrgEntityProvider.from_config(account, group_naming_strategy="kebab-case-name")
    await provider.connect(connection)
    await provider.run()

- OktaUserEntityProvider emits User entities.
- OktaGroupEntityProvider emits Group entities.
- OktaOrgEntityProvider emits both in one mutation, users first.

A run reads the directory from scratch and replaces everything the provider
emitted before with one full mutation. If reading the directory fails, the
error propagates and nothing is applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import structlog

from backstage_plugins.catalog.entities import (
    ANNOTATION_LOCATION,
    ANNOTATION_ORIGIN_LOCATION,
    DeferredEntity,
    EntityMutation,
)
from backstage_plugins.catalog.mapper import MappingConfig, build_group_entities, build_user_entities
from backstage_plugins.catalog.naming import (
    resolve_group_naming_strategy,
    resolve_user_naming_strategy,
)
from backstage_plugins.okta.client import OktaClient

if TYPE_CHECKING:
    from backstage_plugins.catalog.connection import EntityProviderConnection
    from backstage_plugins.catalog.entities import Entity
    from backstage_plugins.catalog.naming import GroupNamingStrategy, UserNamingStrategy
    from backstage_plugins.config import OktaAccountConfig, OktaSettings

logger = structlog.get_logger(__name__)


def default_annotations(org_url: str) -> dict[str, str]:
    return {
        ANNOTATION_LOCATION: f"url:{org_url}",
        ANNOTATION_ORIGIN_LOCATION: f"url:{org_url}",
    }


class OktaEntityProvider:
    """Base class wiring an Okta client, mapping options and a catalog connection together."""

    name_prefix = "okta"

    def __init__(
        self,
        account: OktaAccountConfig,
        mapping: MappingConfig,
        client: Any | None = None,
    ) -> None:
        """
        Args:
            account: The Okta org to read.
            mapping: Naming and hierarchy options.
            client: Directory client; an OktaClient for the account by default.
                    Anything with the OktaClient listing methods that is an
                    async context manager will do.
        """
        self._account = account
        self._mapping = mapping
        self._client = client or OktaClient(account.org_url, account.token)
        self._connection: EntityProviderConnection | None = None

    @classmethod
    def from_config(
        cls,
        account: OktaAccountConfig,
        *,
        group_naming_strategy: str | GroupNamingStrategy | None = None,
        user_naming_strategy: str | UserNamingStrategy | None = None,
        parent_group_field: str | None = None,
        include_empty_groups: bool = False,
        client: Any | None = None,
    ) -> Self:
        """
        Build a provider from an account and mapping options.

        Naming strategies can be given as tags (see catalog.naming) or callables.

        Raises:
            ValueError: If a naming strategy tag is unknown.
        """
        mapping = MappingConfig(
            naming_strategy=resolve_group_naming_strategy(group_naming_strategy),
            user_naming_strategy=resolve_user_naming_strategy(user_naming_strategy),
            parent_group_field=parent_group_field,
            include_empty_groups=include_empty_groups,
            annotations=default_annotations(account.org_url),
        )
        return cls(account, mapping, client=client)

    def get_provider_name(self) -> str:
        return f"{self.name_prefix}-{self._account.org_url}"

    async def connect(self, connection: EntityProviderConnection) -> None:
        self._connection = connection

    async def _read_entities(self, client: Any) -> list[Entity]:
        raise NotImplementedError

    async def run(self) -> None:
        """
        Read the directory and apply one full mutation.

        Raises:
            RuntimeError: If the provider is not connected.
            OktaError: If the directory cannot be read.
        """
        if self._connection is None:
            raise RuntimeError(f"{self.get_provider_name()} is not connected")

        log = logger.bind(provider=self.get_provider_name())
        log.info("Reading Okta directory")

        async with self._client as client:
            entities = await self._read_entities(client)

        location_key = self.get_provider_name()
        mutation = EntityMutation(
            entities=[DeferredEntity(entity=entity, location_key=location_key) for entity in entities]
        )
        await self._connection.apply_mutation(mutation)
        log.info("Applied full mutation", entities=len(entities))


class OktaUserEntityProvider(OktaEntityProvider):
    name_prefix = "okta-user"

    async def _read_entities(self, client: Any) -> list[Entity]:
        return await build_user_entities(client.list_users(search=self._account.user_filter), self._mapping)


class OktaGroupEntityProvider(OktaEntityProvider):
    name_prefix = "okta-group"

    async def _read_entities(self, client: Any) -> list[Entity]:
        return await build_group_entities(client.list_groups(search=self._account.group_filter), self._mapping)


class OktaOrgEntityProvider(OktaEntityProvider):
    name_prefix = "okta-org-provider"

    async def _read_entities(self, client: Any) -> list[Entity]:
        users = await build_user_entities(client.list_users(search=self._account.user_filter), self._mapping)
        groups = await build_group_entities(client.list_groups(search=self._account.group_filter), self._mapping)
        return [*users, *groups]


def org_providers_from_settings(settings: OktaSettings) -> list[OktaOrgEntityProvider]:
    """One OktaOrgEntityProvider per configured account, sharing the mapping options."""
    return [
        OktaOrgEntityProvider.from_config(
            account,
            group_naming_strategy=settings.group_naming_strategy,
            user_naming_strategy=settings.user_naming_strategy,
            parent_group_field=settings.parent_group_field,
            include_empty_groups=settings.include_empty_groups,
        )
        for account in settings.accounts
    ]
