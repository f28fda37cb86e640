#!/usr/bin/env python3
"""
ASPIRE2COOLIFY STRUCTURER - The Architect (Phase 1.3)
-----------------------------------------------------
Turns the flat list of FluentChains into an AspireApp: classifies every
chain, redirects container kinds that are really databases or storage,
folds child databases into their servers and builds the reference graph.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from typing import List, Optional

from aspire2coolify.core.models import (
    AspireApp, FluentChain, Database, StorageService, Service, Reference,
)
from aspire2coolify.parser.context import ParseResult, ParseError
from aspire2coolify.parser.scanner import LambdaScanner
from aspire2coolify.parser.extractors.database import (
    is_database_chain, extract_database, extract_child_databases, remove_parent_servers,
)
from aspire2coolify.parser.extractors.container import is_container_chain, extract_container
from aspire2coolify.parser.extractors.application import is_application_chain, extract_application
from aspire2coolify.rules.mappings import connection_string_env
from aspire2coolify.validator.validator import ModelValidator

logger = logging.getLogger("aspire2coolify.structurer")

# Container kinds that belong in another collection
DATABASE_CONTAINER_KINDS = ("redis", "mongodb")
STORAGE_CONTAINER_KINDS = ("minio",)


class ModelAssembler:
    """
    Merges extractor output into one AspireApp. Never raises: a chain that
    fails to extract becomes a ParseError and assembly moves on.
    """

    def __init__(self, scanner: Optional[LambdaScanner] = None, validator: Optional[ModelValidator] = None):
        self.scanner = scanner or LambdaScanner()
        self.validator = validator or ModelValidator()

    def assemble(self, chains: List[FluentChain]) -> ParseResult:
        result = ParseResult(chains=list(chains))
        app = result.app

        # --- PHASE 1: CLASSIFICATION ---
        for chain in chains:
            try:
                self._classify(app, chain)
            except Exception as e:
                logger.debug("Chain extraction failed: %s", e)
                result.errors.append(ParseError(
                    message=f"Failed to parse chain: {e}",
                    context=chain.raw[:100],
                ))

        # --- PHASE 2: CHILD DATABASES ---
        # Set first, filter second: a server with any child is dropped
        children = extract_child_databases(chains)
        app.databases = remove_parent_servers(app.databases, children) + children

        # --- PHASE 3: REFERENCE GRAPH ---
        app.references = self.build_references(app)

        # --- PHASE 4: VALIDATION ---
        result.warnings.extend(self.validator.validate(app))
        return result

    def _classify(self, app: AspireApp, chain: FluentChain) -> None:
        if is_database_chain(chain):
            app.databases.append(extract_database(chain, self.scanner))
        elif is_container_chain(chain):
            service = extract_container(chain, self.scanner)
            if service.type in DATABASE_CONTAINER_KINDS:
                app.databases.append(self._as_database(service))
            elif service.type in STORAGE_CONTAINER_KINDS:
                app.storage.append(self._as_storage(service))
            else:
                app.services.append(service)
        elif is_application_chain(chain):
            app.applications.append(extract_application(chain, self.scanner))

    @staticmethod
    def _as_database(service: Service) -> Database:
        return Database(
            name=service.name,
            type=service.type,
            variable_name=service.variable_name,
            image=service.image,
            image_tag=service.image_tag,
            host_port=service.host_port,
            has_data_volume=any(v.is_data for v in service.volumes),
            environment=service.environment,
        )

    @staticmethod
    def _as_storage(service: Service) -> StorageService:
        return StorageService(
            name=service.name,
            type=service.type,
            variable_name=service.variable_name,
            image=service.image,
            image_tag=service.image_tag,
            host_port=service.host_port,
            environment=service.environment,
            volumes=service.volumes,
        )

    @staticmethod
    def build_references(app: AspireApp) -> List[Reference]:
        """
        One edge per resolvable WithReference target, applications first,
        then services. Database targets carry their connection-string variable.
        """
        references: List[Reference] = []
        owners = [(a.name, a.references) for a in app.applications] + \
                 [(s.name, s.references) for s in app.services]

        for owner, targets in owners:
            for target in targets:
                found = app.resolve(target)
                if found is None:
                    continue
                category, record = found
                references.append(Reference(
                    from_resource=owner,
                    to=record.name,
                    connection_string_env=connection_string_env(record.type) if category == "database" else None,
                ))
        return references
