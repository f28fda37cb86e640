#!/usr/bin/env python3
"""
ASPIRE2COOLIFY CORE MODELS
--------------------------
Defines the fundamental data structures used across the translation engine.
Chains are the lowest level of abstraction (one fluent statement each); the
typed resource records and the AspireApp aggregate are what the generators
and the deployment engine consume.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any, Tuple

# Resource categories, in deployment order
CATEGORY_ORDER = ("database", "storage", "service", "application")


@dataclass
class MethodCall:
    """A single `.Method(args)` link of a fluent chain."""
    method: str
    args: List[str] = field(default_factory=list)
    raw_args: str = ""


@dataclass
class FluentChain:
    """
    The atomic unit of a Program.cs file.

    A FluentChain represents one statement rooted at an `Add*` factory call,
    e.g. `var pg = builder.AddPostgres("pg").WithDataVolume();`
    """
    root_method: str                      # e.g. 'AddPostgres'
    name: str = ""                        # First string argument of the root call
    variable_name: Optional[str] = None   # Bound `var` name, if any
    base_object: Optional[str] = None     # Object the root method is called on
    root_args: List[str] = field(default_factory=list)
    chained_methods: List[MethodCall] = field(default_factory=list)
    raw: str = ""                         # Normalized statement text for recovery/debugging


@dataclass
class EnvironmentVariable:
    key: str
    value: str
    # True when the value is a C# expression (variable reference) rather than a literal
    is_expression: bool = False


@dataclass
class Volume:
    name: Optional[str] = None
    mount_path: Optional[str] = None
    is_data: bool = False


@dataclass
class Endpoint:
    protocol: str = "http"
    is_external: bool = False
    name: Optional[str] = None
    port: Optional[int] = None
    target_port: Optional[int] = None
    env_variable: Optional[str] = None


@dataclass
class Database:
    name: str
    type: str = "postgres"
    variable_name: Optional[str] = None
    server_name: Optional[str] = None           # Parent server (child databases only)
    server_variable_name: Optional[str] = None
    image: Optional[str] = None
    image_tag: Optional[str] = None
    host_port: Optional[int] = None
    has_data_volume: bool = False
    environment: List[EnvironmentVariable] = field(default_factory=list)


@dataclass
class Service:
    name: str
    type: str = "custom"
    variable_name: Optional[str] = None
    image: Optional[str] = None
    image_tag: Optional[str] = None
    host_port: Optional[int] = None
    environment: List[EnvironmentVariable] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)
    endpoints: List[Endpoint] = field(default_factory=list)
    references: List[str] = field(default_factory=list)


@dataclass
class StorageService:
    name: str
    type: str = "minio"
    variable_name: Optional[str] = None
    image: Optional[str] = None
    image_tag: Optional[str] = None
    host_port: Optional[int] = None
    environment: List[EnvironmentVariable] = field(default_factory=list)
    volumes: List[Volume] = field(default_factory=list)


@dataclass
class Application:
    name: str
    type: str = "project"
    build_pack: str = "dockerfile"
    variable_name: Optional[str] = None
    source_path: Optional[str] = None
    project: Optional[str] = None          # Type argument of AddProject<T>
    publish_mode: Optional[str] = None     # Explicit PublishAs* override
    environment: List[EnvironmentVariable] = field(default_factory=list)
    endpoints: List[Endpoint] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    wait_for: Optional[List[str]] = None
    run_script: Optional[str] = None
    npm_install_command: Optional[str] = None


@dataclass
class Reference:
    from_resource: str
    to: str
    connection_string_env: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"from": self.from_resource, "to": self.to}
        if self.connection_string_env:
            data["connection_string_env"] = self.connection_string_env
        return data


def _prune(value: Any) -> Any:
    """Drops None entries so the JSON output only carries what was parsed."""
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


@dataclass
class AspireApp:
    """
    The assembled application model: four resource collections plus the
    reference edges between them.
    """
    databases: List[Database] = field(default_factory=list)
    storage: List[StorageService] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    applications: List[Application] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)

    def resource_count(self) -> int:
        return len(self.databases) + len(self.storage) + len(self.services) + len(self.applications)

    def resources(self, category: str) -> List[Any]:
        """The records of one entry of CATEGORY_ORDER."""
        return {
            "database": self.databases,
            "storage": self.storage,
            "service": self.services,
            "application": self.applications,
        }[category]

    def resolve(self, ref: str, include_applications: bool = False) -> Optional[Tuple[str, Any]]:
        """
        Finds the resource a reference name points at, by declared name or
        bound variable. Collections are searched databases, services, storage
        (then applications when asked); the first match wins.
        """
        collections = [("database", self.databases), ("service", self.services), ("storage", self.storage)]
        if include_applications:
            collections.append(("application", self.applications))

        for category, records in collections:
            for record in records:
                if record.variable_name == ref or record.name == ref:
                    return category, record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "databases": [_prune(asdict(d)) for d in self.databases],
            "storage": [_prune(asdict(s)) for s in self.storage],
            "services": [_prune(asdict(s)) for s in self.services],
            "applications": [_prune(asdict(a)) for a in self.applications],
            "references": [r.to_dict() for r in self.references],
        }


# --- GENERATION & DEPLOYMENT TARGETS ---

# Shell placeholders used when an identifier is not known at generation time
SERVER_PLACEHOLDER = "${SERVER_UUID}"
PROJECT_PLACEHOLDER = "${PROJECT_UUID}"
ENVIRONMENT_PLACEHOLDER = "${ENVIRONMENT_NAME}"
PLACEHOLDERS = (SERVER_PLACEHOLDER, PROJECT_PLACEHOLDER, ENVIRONMENT_PLACEHOLDER)


@dataclass
class RepositoryConfig:
    """Git source for applications; app_uuid selects the private GitHub App flow."""
    repository: str
    branch: str = "main"
    base_path: Optional[str] = None
    app_uuid: Optional[str] = None


@dataclass
class Operation:
    """One remote API call, ready to be rendered into a script or exported."""
    endpoint: str
    payload: Dict[str, Any]
    display_name: str
    category: str
    method: str = "POST"
    annotation: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return _prune(asdict(self))


@dataclass
class GenerateOptions:
    include_comments: bool = True
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    server_id: Optional[str] = None
    environment_name: Optional[str] = None
    instant_deploy: Optional[bool] = None
    repository: Optional[RepositoryConfig] = None
    build_pack: Optional[str] = None

    def target_fields(self) -> Dict[str, str]:
        """server/project/environment payload fields, placeholders where unknown."""
        return {
            "server_uuid": self.server_id or SERVER_PLACEHOLDER,
            "project_uuid": self.project_id or PROJECT_PLACEHOLDER,
            "environment_name": self.environment_name or ENVIRONMENT_PLACEHOLDER,
        }


@dataclass
class GenerateResult:
    operations: List[Operation] = field(default_factory=list)
    script: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
