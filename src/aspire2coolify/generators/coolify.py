#!/usr/bin/env python3
"""
ASPIRE2COOLIFY GENERATOR - Operation Planner
--------------------------------------------
Maps an AspireApp onto the ordered list of Coolify API operations that
would create it, plus a runnable bash rendering of the same plan.

Order is fixed: databases, storage, services, applications. Applications
go last because they are the ones referencing everything else.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from typing import Optional

from aspire2coolify.core.models import AspireApp, Operation, GenerateOptions, GenerateResult, CATEGORY_ORDER
from aspire2coolify.generators.database import generate_database_operation
from aspire2coolify.generators.service import generate_service_operation, generate_storage_operation
from aspire2coolify.generators.application import generate_application_operation
from aspire2coolify.generators.script import render_script

logger = logging.getLogger("aspire2coolify.generator")


def project_operation(name: str, include_comments: bool = True) -> Operation:
    return Operation(
        endpoint="/projects",
        payload={"name": name},
        display_name=name,
        category="project",
        annotation=f"Project: {name}" if include_comments else None,
    )


def generate(app: AspireApp, options: Optional[GenerateOptions] = None) -> GenerateResult:
    """
    Builds one operation per resource. A resource that fails to map is
    recorded in `errors` and left out; the rest of the plan is still produced.
    """
    options = options or GenerateOptions()
    result = GenerateResult()

    # 0. Project bootstrap when only a name is known
    if options.project_name and not options.project_id:
        result.operations.append(project_operation(options.project_name, options.include_comments))

    # 1. Databases, storage, services, applications
    planners = {
        "database": lambda db: generate_database_operation(db, options),
        "storage": lambda storage: (generate_storage_operation(storage, options), []),
        "service": lambda service: (generate_service_operation(service, options), []),
        "application": lambda application: (generate_application_operation(application, app, options), []),
    }
    for category in CATEGORY_ORDER:
        for record in app.resources(category):
            try:
                operation, warnings = planners[category](record)
            except Exception as e:
                result.errors.append(f"Failed to generate {category} operation for {record.name}: {e}")
                continue
            result.operations.append(operation)
            result.warnings.extend(warnings)

    for msg in result.errors:
        logger.error(msg)

    result.script = render_script(result.operations, options.include_comments)
    return result
