# ABOUTME: Okta directory package for the catalog entity providers
# ABOUTME: Exposes the Okta client and its user and group records

"""
Okta directory access:
    - client.py: Paginated Okta Management API client
    - models.py: OktaUser and OktaGroup records
"""

from backstage_plugins.okta.client import OktaClient, OktaError
from backstage_plugins.okta.models import OktaGroup, OktaUser

__all__ = ["OktaClient", "OktaError", "OktaGroup", "OktaUser"]
