# ABOUTME: Catalog package of the Okta entity provider plugin
# ABOUTME: Entity shapes, naming strategies, mapping and providers

"""
Okta catalog plugin:
    - entities.py: Group and User entities, full mutations
    - naming.py: Naming strategies for groups and users
    - mapper.py: Okta records to entities, with per-record failure isolation
    - providers.py: User, Group and Org entity providers
    - connection.py: Catalog sink interface and a JSON lines sink
"""

from backstage_plugins.catalog.mapper import MappingConfig, build_group_entities, build_user_entities
from backstage_plugins.catalog.providers import (
    OktaGroupEntityProvider,
    OktaOrgEntityProvider,
    OktaUserEntityProvider,
)

__all__ = [
    "MappingConfig",
    "OktaGroupEntityProvider",
    "OktaOrgEntityProvider",
    "OktaUserEntityProvider",
    "build_group_entities",
    "build_user_entities",
]
