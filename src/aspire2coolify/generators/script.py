"""
Renders generated operations as a standalone bash script of curl calls.

The script refuses to run unless COOLIFY_API_URL, COOLIFY_TOKEN and every
placeholder variable its payloads use are set. A leading project-creation
operation fills PROJECT_UUID from the API response.
"""

import re
import json
import shlex
from typing import List

from aspire2coolify.core.models import Operation, PLACEHOLDERS, PROJECT_PLACEHOLDER

REQUIRED_ENV = ("COOLIFY_API_URL", "COOLIFY_TOKEN")

_SHELL_SPECIAL = re.compile(r'([\\`$])')
_UUID_SED = r"""sed -n 's/.*"uuid" *: *"\([^"]*\)".*/\1/p'"""


def placeholder_name(placeholder: str) -> str:
    return placeholder[2:-1]


def escape_heredoc(text: str) -> str:
    """Escapes text for an unquoted heredoc; only the known placeholders expand."""
    escaped = _SHELL_SPECIAL.sub(r'\\\1', text)
    for placeholder in PLACEHOLDERS:
        escaped = escaped.replace('\\' + placeholder, placeholder)
    return escaped


def _curl(operation: Operation, silent: bool = False) -> List[str]:
    flags = "-s -X" if silent else "-X"
    return [
        f'curl {flags} {operation.method} "${{COOLIFY_API_URL}}/api/v1{operation.endpoint}" \\',
        '  -H "Authorization: Bearer ${COOLIFY_TOKEN}" \\',
        '  -H "Content-Type: application/json" \\',
    ]


def _body(operation: Operation) -> List[str]:
    return escape_heredoc(json.dumps(operation.payload, indent=2)).splitlines() + ["EOF"]


def _render_project(operation: Operation) -> List[str]:
    lines = [f"echo {shlex.quote('Creating project: ' + operation.display_name)}"]
    curl = _curl(operation, silent=True)
    lines.append("PROJECT_UUID=$(" + curl[0])
    lines.extend(curl[1:])
    lines.append(f"  -d @- <<EOF | {_UUID_SED}")
    lines.extend(_body(operation))
    lines.append(")")
    lines.extend([
        'if [ -z "$PROJECT_UUID" ]; then',
        '  echo "Error: project creation returned no uuid" >&2',
        '  exit 1',
        'fi',
        'echo "Project uuid: $PROJECT_UUID"',
    ])
    return lines


def _render_operation(operation: Operation, include_comments: bool) -> List[str]:
    lines: List[str] = []
    if include_comments and operation.annotation:
        lines.append(f"# {operation.annotation}")
    if include_comments and operation.environment:
        lines.append("# Runtime environment (configure in Coolify):")
        lines.extend(f"#   {key}={value}" for key, value in operation.environment.items())

    lines.append(f"echo {shlex.quote(f'Creating {operation.category}: {operation.display_name}')}")
    lines.extend(_curl(operation))
    lines.append("  -d @- <<EOF")
    lines.extend(_body(operation))
    lines.append("echo")
    return lines


def used_placeholders(operations: List[Operation]) -> List[str]:
    """Placeholder variable names the script needs from the environment."""
    creates_project = any(op.category == "project" for op in operations)
    blob = json.dumps([op.payload for op in operations])
    names = []
    for placeholder in PLACEHOLDERS:
        if placeholder not in blob:
            continue
        if placeholder == PROJECT_PLACEHOLDER and creates_project:
            continue
        names.append(placeholder_name(placeholder))
    return names


def render_script(operations: List[Operation], include_comments: bool = True) -> str:
    required = list(REQUIRED_ENV) + used_placeholders(operations)

    lines = [
        "#!/bin/bash",
        "# Coolify deployment script generated by aspire2coolify",
        "set -e",
        "",
        f"required=({' '.join(required)})",
        'for var in "${required[@]}"; do',
        '  if [ -z "${!var}" ]; then',
        '    echo "Error: $var is not set" >&2',
        '    exit 1',
        '  fi',
        'done',
        "",
    ]

    for operation in operations:
        if operation.category == "project":
            lines.extend(_render_project(operation))
        else:
            lines.extend(_render_operation(operation, include_comments))
        lines.append("")

    lines.append('echo "Done."')
    return "\n".join(lines) + "\n"
