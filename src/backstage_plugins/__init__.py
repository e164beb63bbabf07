# ABOUTME: Backstage backend plugins package initialization
# ABOUTME: Exposes version information

"""
Backstage backend plugins - an Argo CD proxy and an Okta catalog provider.

=============================================================================
PACKAGE STRUCTURE OVERVIEW
=============================================================================

backstage_plugins/
├── __init__.py          <- Package entry point
├── config.py            <- Configuration management (env vars, settings)
├── server.py            <- FastAPI app serving the Argo CD proxy routes
├── sync.py              <- One-shot Okta catalog synchronization command
├── argocd/
│   ├── client.py        <- HTTP client for the Argo CD REST API
│   ├── service.py       <- Instance resolution, tokens, cross-instance search
│   └── router.py        <- Proxy routes
├── okta/
│   ├── client.py        <- Paginated Okta Management API client
│   └── models.py        <- Okta user and group records
├── catalog/
│   ├── entities.py      <- Catalog Group and User entities, full mutations
│   ├── naming.py        <- Naming strategies
│   ├── mapper.py        <- Okta records to catalog entities
│   ├── providers.py     <- User, Group and Org entity providers
│   └── connection.py    <- Catalog sink interface
└── utils/
    └── logging.py       <- Structured logging with correlation IDs
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
