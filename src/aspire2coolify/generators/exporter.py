#!/usr/bin/env python3
"""
ASPIRE2COOLIFY EXPORTER - Plan Serializer
-----------------------------------------
Serializes generated operations (or a parsed model) to JSON or YAML.
YAML output goes through the ruamel round-trip dumper so operation
annotations survive as comments.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import io
import json
from typing import Any, List

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from aspire2coolify.core.models import AspireApp, Operation

FORMATS = ("json", "yaml")


class PlanExporter:
    """
    The Reconstructor: converts operations and models into text.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # 2 spaces for maps, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def _commented(self, data: Any) -> Any:
        """Recursively wraps plain containers so ruamel can attach comments."""
        if isinstance(data, dict):
            cm = CommentedMap()
            for key, value in data.items():
                cm[key] = self._commented(value)
            return cm
        if isinstance(data, list):
            return CommentedSeq(self._commented(item) for item in data)
        return data

    def _dump_yaml(self, data: Any) -> str:
        stream = io.StringIO()
        self.yaml.dump(data, stream)
        return stream.getvalue()

    def export_operations(self, operations: List[Operation], fmt: str = "json") -> str:
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}' (expected one of {', '.join(FORMATS)})")

        if fmt == "json":
            return json.dumps({"operations": [op.to_dict() for op in operations]}, indent=2) + "\n"

        seq = CommentedSeq()
        for op in operations:
            data = op.to_dict()
            annotation = data.pop("annotation", None)
            item = self._commented(data)
            if annotation:
                # Annotation rides on the endpoint line
                item.yaml_add_eol_comment(annotation, "endpoint")
            seq.append(item)

        root = CommentedMap()
        root["operations"] = seq
        return self._dump_yaml(root)

    def export_model(self, app: AspireApp, fmt: str = "json", compact: bool = False) -> str:
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}' (expected one of {', '.join(FORMATS)})")
        data = app.to_dict()
        if fmt == "json":
            return json.dumps(data, indent=None if compact else 2) + "\n"
        return self._dump_yaml(self._commented(data))
