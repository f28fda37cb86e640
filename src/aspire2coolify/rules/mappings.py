#!/usr/bin/env python3
"""
ASPIRE2COOLIFY MAPPING RULES - Kind Translation
-----------------------------------------------
Static lookup tables that translate Aspire resource kinds into what the
Coolify API understands: database endpoints, one-click service types and
the connection-string variable an application receives for a reference.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from types import MappingProxyType
from typing import Tuple, List

logger = logging.getLogger("aspire2coolify.rules")

CONNECTION_STRING_ENV = MappingProxyType({
    "postgres": "DATABASE_URL",
    "sqlserver": "SQLSERVER_CONNECTION_STRING",
    "mysql": "MYSQL_URL",
    "mongodb": "MONGODB_URL",
    "redis": "REDIS_URL",
})
DEFAULT_CONNECTION_STRING_ENV = "CONNECTION_STRING"

# Coolify has no SQL Server database; it is provisioned as PostgreSQL
DATABASE_REMOTE_KINDS = MappingProxyType({
    "postgres": "postgresql",
    "sqlserver": "postgresql",
    "mysql": "mysql",
    "mongodb": "mongodb",
    "redis": "redis",
})
DEFAULT_DATABASE_REMOTE_KIND = "postgresql"
SUBSTITUTED_DATABASE_KINDS = frozenset({"sqlserver"})

SERVICE_REMOTE_KINDS = MappingProxyType({
    "rabbitmq": "rabbitmq",
    "keycloak": "keycloak",
    "seq": "seq",
    "kafka": "kafka",
    "elasticsearch": "elasticsearch",
    "minio": "minio-community-edition",
    "azurite": "minio-community-edition",
    "maildev": "mailpit",
    "mailpit": "mailpit",
})


def connection_string_env(kind: str) -> str:
    return CONNECTION_STRING_ENV.get(kind, DEFAULT_CONNECTION_STRING_ENV)


def remote_database_kind(kind: str, name: str = "") -> Tuple[str, List[str]]:
    """
    Returns the Coolify database kind plus any substitution warnings.
    Unknown kinds fall back to PostgreSQL.
    """
    warnings: List[str] = []
    remote = DATABASE_REMOTE_KINDS.get(kind, DEFAULT_DATABASE_REMOTE_KIND)

    if kind in SUBSTITUTED_DATABASE_KINDS:
        label = f'"{name}" ' if name else ""
        msg = f"Database {label}uses {kind}, which Coolify does not support; deploying as PostgreSQL instead."
        logger.warning(msg)
        warnings.append(msg)

    return remote, warnings


def remote_service_kind(kind: str) -> str:
    """Coolify one-click service type; unmapped kinds pass through verbatim."""
    return SERVICE_REMOTE_KINDS.get(kind, kind)
