# ABOUTME: Argo CD proxy plugin package
# ABOUTME: Client, lookup service, and HTTP routes for Argo CD applications

"""
Argo CD proxy plugin:
    - client.py: Argo CD REST client (session login, application lookups)
    - service.py: Instance resolution, token handling, cross-instance search
    - router.py: FastAPI routes relaying Argo CD responses
"""

from backstage_plugins.argocd.client import ArgocdClient, ArgocdError
from backstage_plugins.argocd.router import create_router
from backstage_plugins.argocd.service import ArgoService

__all__ = ["ArgoService", "ArgocdClient", "ArgocdError", "create_router"]
