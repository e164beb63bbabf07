# ABOUTME: Configuration management for the Backstage backend plugins
# ABOUTME: Handles Argo CD instance locators, Okta accounts, and server settings

"""
Configuration management using pydantic-settings.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module handles all configuration for both plugins. It:

1. READS environment variables (like ARGOCD_USERNAME, OKTA_ACCOUNTS)
2. VALIDATES them (URLs get a scheme, booleans are booleans, etc.)
3. PROVIDES typed access to settings throughout the application

=============================================================================
ARCHITECTURE
=============================================================================

1. ArgocdInstance / AppLocatorMethod: where the Argo CD servers are
   - Each instance has a name, URL and either a static token or credentials
   - Only locator methods of type "config" contribute instances

2. ArgocdSettings: Argo CD proxy settings (ARGOCD_ prefix)
   - Fallback login credentials used when an instance has none of its own

3. OktaAccountConfig / OktaSettings: Okta catalog sync (OKTA_ prefix)
   - One entry per Okta org, plus the mapping options shared by all of them

4. ServerSettings: Main configuration container (BACKSTAGE_PLUGINS_ prefix)
   - Listen address, log level, nested ArgocdSettings and OktaSettings

=============================================================================
ENVIRONMENT VARIABLE MAPPING
=============================================================================

Argo CD proxy:
    ARGOCD_USERNAME             -> Fallback login user (default: argocdUsername)
    ARGOCD_PASSWORD             -> Fallback login password (default: argocdPassword)
    ARGOCD_APP_LOCATOR_METHODS  -> JSON array of {"type": "config", "instances": [...]}

Okta catalog sync:
    OKTA_ACCOUNTS               -> JSON array of {"orgUrl", "token", "userFilter", "groupFilter"}
    OKTA_GROUP_NAMING_STRATEGY  -> "id", "kebab-case-name" or "profile-field:<field>"
    OKTA_USER_NAMING_STRATEGY   -> "id", "kebab-case-email" or "strip-domain-email"
    OKTA_PARENT_GROUP_FIELD     -> Group profile field holding the parent group name
    OKTA_INCLUDE_EMPTY_GROUPS   -> Emit groups without members (default: false)

Server:
    BACKSTAGE_PLUGINS_HOST, BACKSTAGE_PLUGINS_PORT,
    BACKSTAGE_PLUGINS_LOG_LEVEL, BACKSTAGE_PLUGINS_JSON_LOGS
"""

from __future__ import annotations

import os
from typing import Annotated

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _normalize_url(v: str) -> str:
    """Ensure URL has a scheme (https by default) and no trailing slash."""
    if not v.startswith(("http://", "https://")):
        v = f"https://{v}"
    return v.rstrip("/")


# =============================================================================
# ARGO CD INSTANCES
# =============================================================================


class ArgocdInstance(BaseModel):
    """
    Configuration for a single Argo CD instance.

    An instance authenticates either with a static token or by logging in
    with a username and password. When neither the token nor credentials are
    set on the instance, the proxy falls back to the global credentials in
    ArgocdSettings.

    USAGE EXAMPLE:
    --------------
        instance = ArgocdInstance(
            name="production",
            url="https://argocd.example.com",
            token=SecretStr("my-api-token"),
        )
    """

    model_config = {"extra": "ignore"}

    name: str = Field(description="Instance identifier used in proxy routes")
    url: str = Field(description="Argo CD server URL")
    token: SecretStr | None = Field(default=None, description="Static Argo CD API token")
    username: str | None = Field(default=None, description="Login user for this instance")
    password: SecretStr | None = Field(default=None, description="Login password for this instance")
    insecure: bool = Field(default=False, description="Skip TLS verification")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL has proper scheme and no trailing slash."""
        return _normalize_url(v)


class AppLocatorMethod(BaseModel):
    """
    A way of locating Argo CD applications.

    Only the "config" type is understood: its instances are listed inline.
    Other types are accepted and ignored, so configuration shared with other
    tools does not fail validation here.
    """

    model_config = {"extra": "ignore"}

    type: str = Field(description="Locator type, only 'config' is used")
    instances: list[ArgocdInstance] = Field(default_factory=list)


class ArgocdSettings(BaseSettings):
    """Argo CD proxy configuration."""

    model_config = SettingsConfigDict(env_prefix="ARGOCD_", extra="ignore")

    username: str = Field(
        default="argocdUsername",
        description="Login user for instances without their own credentials",
    )
    password: SecretStr = Field(
        default=SecretStr("argocdPassword"),
        description="Login password for instances without their own credentials",
    )
    app_locator_methods: list[AppLocatorMethod] = Field(default_factory=list)

    @property
    def instances(self) -> list[ArgocdInstance]:
        """All instances listed by locator methods of type 'config', in order."""
        instances: list[ArgocdInstance] = []
        for method in self.app_locator_methods:
            if method.type == "config":
                instances.extend(method.instances)
        return instances

    def get_instance(self, name: str) -> ArgocdInstance | None:
        """
        Get Argo CD instance by name.

        Returns:
            The first instance with a matching name, None otherwise.
        """
        for instance in self.instances:
            if instance.name == name:
                return instance
        return None


# =============================================================================
# OKTA ACCOUNTS
# =============================================================================


class OktaAccountConfig(BaseModel):
    """
    Connection settings for one Okta org.

    Keys can be given in snake_case or in the camelCase used by Backstage
    app-config files (orgUrl, userFilter, groupFilter).
    """

    model_config = {"extra": "ignore", "populate_by_name": True}

    org_url: str = Field(alias="orgUrl", description="Okta org URL")
    token: SecretStr = Field(description="Okta API token (SSWS)")
    user_filter: str | None = Field(
        default=None,
        alias="userFilter",
        description="Okta search expression restricting listed users",
    )
    group_filter: str | None = Field(
        default=None,
        alias="groupFilter",
        description="Okta search expression restricting listed groups",
    )

    @field_validator("org_url")
    @classmethod
    def validate_org_url(cls, v: str) -> str:
        """Ensure URL has proper scheme and no trailing slash."""
        return _normalize_url(v)


class OktaSettings(BaseSettings):
    """Okta catalog synchronization configuration."""

    model_config = SettingsConfigDict(env_prefix="OKTA_", extra="ignore")

    accounts: list[OktaAccountConfig] = Field(default_factory=list)
    group_naming_strategy: str = Field(default="id", description="Group naming strategy tag")
    user_naming_strategy: str = Field(default="id", description="User naming strategy tag")
    parent_group_field: str | None = Field(
        default=None,
        description="Group profile field whose value names the parent group",
    )
    include_empty_groups: bool = Field(
        default=False,
        description="Emit groups that end up with no members",
    )


# =============================================================================
# MAIN SERVER SETTINGS
# =============================================================================


class ServerSettings(BaseSettings):
    """
    Main configuration container.

    USAGE:
    ------
        settings = load_settings()
        settings.argocd.get_instance("production")
        settings.okta.accounts
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKSTAGE_PLUGINS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    host: str = Field(default="127.0.0.1", description="Address the proxy listens on")
    port: int = Field(default=7007, description="Port the proxy listens on")

    log_level: Annotated[str, Field(pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    argocd: ArgocdSettings = Field(default_factory=ArgocdSettings)
    okta: OktaSettings = Field(default_factory=OktaSettings)


def load_settings() -> ServerSettings:
    """
    Load settings from environment with validation.

    If BACKSTAGE_PLUGINS_ENV_FILE is set, additional variables are read from
    that file. Useful for local development.

    Raises:
        pydantic.ValidationError: If configuration is invalid.
    """
    env_file = os.environ.get("BACKSTAGE_PLUGINS_ENV_FILE")
    # nested settings read their own prefixes, so each gets the env file too
    return ServerSettings(
        argocd=ArgocdSettings(_env_file=env_file),
        okta=OktaSettings(_env_file=env_file),
        _env_file=env_file,
    )
