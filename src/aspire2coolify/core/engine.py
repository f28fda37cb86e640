#!/usr/bin/env python3
"""
ASPIRE2COOLIFY ENGINE - The High Orchestrator
---------------------------------------------
The DeploymentEngine walks an AspireApp in dependency order (databases,
storage, services, applications) and creates each resource through the
Coolify API. Existing resources are detected from a single inventory
fetch, failures are recorded per resource and the run always completes.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional

from aspire2coolify.core.models import AspireApp, Database, Application, RepositoryConfig, CATEGORY_ORDER
from aspire2coolify.api.client import ApiResponse, names_to_uuids
from aspire2coolify.generators.database import database_payload
from aspire2coolify.generators.service import service_payload, ServiceLike
from aspire2coolify.generators.application import application_payload
from aspire2coolify.rules.mappings import remote_database_kind

logger = logging.getLogger("aspire2coolify.engine")

DRY_RUN_UUID = "dry-run-uuid"

# Aspire database kind -> client method
DATABASE_CREATORS = MappingProxyType({
    "postgres": "create_postgres_database",
    "sqlserver": "create_postgres_database",
    "mysql": "create_mysql_database",
    "mongodb": "create_mongo_database",
    "redis": "create_redis_database",
})

APPLICATION_CREATORS = MappingProxyType({
    "private-github-app": "create_private_github_app_application",
    "public": "create_public_application",
    "dockerimage": "create_docker_image_application",
})

CATEGORY_LABELS = MappingProxyType({
    "database": "Database",
    "storage": "Storage service",
    "service": "Service",
    "application": "Application",
})


@dataclass
class DeployConfig:
    project_uuid: str
    server_uuid: str
    environment_name: str
    # None: databases/services deploy instantly, applications do not
    instant_deploy: Optional[bool] = None
    skip_existing: bool = False
    repository: Optional[RepositoryConfig] = None
    build_pack: Optional[str] = None

    def target_fields(self) -> Dict[str, str]:
        return {
            "server_uuid": self.server_uuid,
            "project_uuid": self.project_uuid,
            "environment_name": self.environment_name,
        }


@dataclass
class DeployResult:
    success: bool
    category: str
    name: str
    identifier: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False


@dataclass
class DeploymentSummary:
    results: List[DeployResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def successful_count(self) -> int:
        return sum(1 for r in self.results if r.success and not r.skipped)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.skipped)


@dataclass
class Inventory:
    """name -> uuid lookups of what already exists remotely."""
    databases: Dict[str, str] = field(default_factory=dict)
    applications: Dict[str, str] = field(default_factory=dict)
    services: Dict[str, str] = field(default_factory=dict)

    def lookup(self, category: str) -> Dict[str, str]:
        if category == "database":
            return self.databases
        if category == "application":
            return self.applications
        return self.services


class DeploymentEngine:
    """
    Principal orchestrator for a deployment run. One remote call at a time,
    strictly in category then declaration order.
    """

    def __init__(self, client: Any, config: DeployConfig, dry_run: bool = False,
                 on_progress: Optional[Callable[[str], None]] = None):
        self.client = client
        self.config = config
        self.dry_run = dry_run
        self.log = on_progress or logger.info
        self.warnings: List[str] = []

    def deploy(self, app: AspireApp) -> DeploymentSummary:
        summary = DeploymentSummary()
        self.warnings = summary.warnings

        # --- PHASE 1: INVENTORY ---
        inventory = Inventory() if self.dry_run else self._fetch_inventory()

        # --- PHASE 2: RESOURCES IN DEPENDENCY ORDER ---
        creators = {
            "database": self._create_database,
            "storage": self._create_service,
            "service": self._create_service,
            "application": self._create_application,
        }
        for category in CATEGORY_ORDER:
            for record in app.resources(category):
                summary.results.append(
                    self._deploy_one(category, record, record.type, creators[category], inventory)
                )

        logger.debug(
            "Deployment finished: %d created, %d failed, %d skipped",
            summary.successful_count, summary.failed_count, summary.skipped_count,
        )
        return summary

    def _fetch_inventory(self) -> Inventory:
        self.log("Fetching existing resources...")
        inventory = Inventory()
        for attr, fetch in (("databases", self.client.list_databases),
                            ("applications", self.client.list_applications),
                            ("services", self.client.list_services)):
            try:
                response = fetch()
            except Exception as e:
                response = ApiResponse(success=False, error=str(e))
            if not response.success:
                msg = f"Could not list existing {attr}: {response.error}"
                logger.warning(msg)
                self.warnings.append(msg)
            setattr(inventory, attr, names_to_uuids(response))

        self.log(
            f"  Found {len(inventory.databases)} databases, {len(inventory.applications)} applications, "
            f"{len(inventory.services)} services"
        )
        return inventory

    def _deploy_one(self, category: str, record: Any, kind: str,
                    create: Callable[[Any, str], DeployResult], inventory: Inventory) -> DeployResult:
        label = CATEGORY_LABELS[category]
        noun = label.lower()

        if self.dry_run:
            self.log(f"[DRY RUN] Would create {noun}: {record.name} ({kind})")
            result = DeployResult(success=True, category=category, name=record.name, identifier=DRY_RUN_UUID)
            self.log(f"  ✓ {label} {record.name} planned")
            return result

        self.log(f"Creating {noun}: {record.name} ({kind})...")
        existing = inventory.lookup(category).get(record.name)
        if existing is not None:
            if self.config.skip_existing:
                self.log(f'  ⊘ Skipped {noun} "{record.name}" (already exists)')
                return DeployResult(success=True, category=category, name=record.name,
                                    identifier=existing, skipped=True)
            self.log(f'  ✗ {label} "{record.name}" already exists (use --skip-existing to skip)')
            return DeployResult(success=False, category=category, name=record.name,
                                error=f'{label} "{record.name}" already exists')

        try:
            result = create(record, category)
        except Exception as e:
            result = DeployResult(success=False, category=category, name=record.name, error=str(e))

        if result.success:
            self.log(f"  ✓ Created {noun} {record.name} (uuid: {result.identifier})")
        else:
            self.log(f"  ✗ Failed to create {noun} {record.name}: {result.error}")
        return result

    def _result(self, category: str, name: str, response: ApiResponse) -> DeployResult:
        if response.success:
            data = response.data if isinstance(response.data, dict) else {}
            return DeployResult(success=True, category=category, name=name, identifier=data.get("uuid"))
        return DeployResult(success=False, category=category, name=name, error=response.error or "Unknown error")

    # --- CREATORS ---

    def _create_database(self, db: Database, category: str) -> DeployResult:
        creator = DATABASE_CREATORS.get(db.type)
        if creator is None:
            return DeployResult(success=False, category=category, name=db.name,
                                error=f"Unsupported database type: {db.type}")

        _, warnings = remote_database_kind(db.type, db.name)
        self.warnings.extend(warnings)

        payload = database_payload(db, self.config.target_fields(), self.config.instant_deploy)
        return self._result(category, db.name, getattr(self.client, creator)(payload))

    def _create_service(self, record: ServiceLike, category: str) -> DeployResult:
        payload = service_payload(record, self.config.target_fields(), self.config.instant_deploy)
        return self._result(category, record.name, self.client.create_service(payload))

    def _create_application(self, application: Application, category: str) -> DeployResult:
        flavor, payload = application_payload(
            application, self.config.target_fields(), self.config.instant_deploy,
            repository=self.config.repository, build_pack=self.config.build_pack,
        )
        creator = getattr(self.client, APPLICATION_CREATORS[flavor])
        return self._result(category, application.name, creator(payload))


def deploy(client: Any, app: AspireApp, config: DeployConfig, dry_run: bool = False,
           on_progress: Optional[Callable[[str], None]] = None) -> DeploymentSummary:
    """Deploy every resource of app; never raises for per-resource failures."""
    return DeploymentEngine(client, config, dry_run=dry_run, on_progress=on_progress).deploy(app)
