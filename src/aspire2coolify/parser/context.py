#!/usr/bin/env python3
"""
ASPIRE2COOLIFY PARSE CONTEXT
----------------------------
The record of a single parse session: the assembled model plus every
error and warning collected on the way. Nothing here is ever raised past
the pipeline boundary; callers decide what to surface.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from aspire2coolify.core.models import AspireApp, FluentChain


@dataclass
class ParseError:
    message: str
    line: Optional[int] = None
    context: Optional[str] = None           # First 100 chars of the offending chain

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (("message", self.message), ("line", self.line), ("context", self.context))
                if v is not None}


@dataclass
class ParseResult:
    """
    Output of the ParsePipeline.

    Initialized by the ModelAssembler and enriched by the Validator.
    """
    app: AspireApp = field(default_factory=AspireApp)
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    chains: List[FluentChain] = field(default_factory=list)   # Raw chains, kept for debugging

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app": self.app.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
        }
