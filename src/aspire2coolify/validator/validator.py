#!/usr/bin/env python3
"""
ASPIRE2COOLIFY VALIDATOR - The Judge
------------------------------------
Advisory checks over an assembled AspireApp. The Validator never rejects a
model: duplicate names and dangling references are reported as warnings and
the model stays usable.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from typing import List

from aspire2coolify.core.models import AspireApp

# Standardized logging for audit trails
logger = logging.getLogger("aspire2coolify.validator")


class ModelValidator:
    """Collects warnings about names and references in an assembled model."""

    def validate(self, app: AspireApp) -> List[str]:
        warnings: List[str] = []

        # --- TEST 1: Name uniqueness across all four collections ---
        warnings.extend(self._check_duplicates(app))

        # --- TEST 2: Reference targets ---
        for application in app.applications:
            warnings.extend(self._check_targets(app, application.name, application.references, "reference"))
            warnings.extend(self._check_targets(app, application.name, application.wait_for or [], "wait-for target"))
        for service in app.services:
            warnings.extend(self._check_targets(app, service.name, service.references, "reference"))

        for msg in warnings:
            logger.debug(msg)
        return warnings

    def _check_duplicates(self, app: AspireApp) -> List[str]:
        """One warning per repeated occurrence, not per distinct name."""
        names = [r.name for r in (*app.databases, *app.services, *app.storage, *app.applications)]
        seen = set()
        warnings = []
        for name in names:
            if name in seen:
                warnings.append(f"Duplicate resource name: {name}")
            seen.add(name)
        return warnings

    def _check_targets(self, app: AspireApp, owner: str, targets: List[str], label: str) -> List[str]:
        return [
            f"Unresolved {label} in {owner}: {target}"
            for target in targets
            if app.resolve(target, include_applications=True) is None
        ]
