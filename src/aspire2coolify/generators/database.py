"""
Database operation generator: one `/databases/<kind>` create call per store.
"""

from typing import Any, Dict, List, Tuple

from aspire2coolify.core.models import Database, Operation, GenerateOptions
from aspire2coolify.rules.mappings import remote_database_kind, SUBSTITUTED_DATABASE_KINDS


def image_reference(image, tag) -> Any:
    if not image:
        return None
    return f"{image}:{tag}" if tag else image


def database_payload(db: Database, target: Dict[str, str], instant_deploy=None) -> Dict[str, Any]:
    """
    Coolify database payload. A substituted kind does not carry its own
    image onto the replacement engine.
    """
    payload: Dict[str, Any] = dict(target)
    payload["name"] = db.name
    payload["instant_deploy"] = True if instant_deploy is None else instant_deploy

    image = image_reference(db.image, db.image_tag)
    if image and db.type not in SUBSTITUTED_DATABASE_KINDS:
        payload["image"] = image

    if db.host_port:
        payload["is_public"] = True
        payload["public_port"] = db.host_port
    return payload


def generate_database_operation(db: Database, options: GenerateOptions) -> Tuple[Operation, List[str]]:
    remote_kind, warnings = remote_database_kind(db.type, db.name)
    operation = Operation(
        endpoint=f"/databases/{remote_kind}",
        payload=database_payload(db, options.target_fields(), options.instant_deploy),
        display_name=db.name,
        category="database",
        annotation=f"Database: {db.name} ({db.type})" if options.include_comments else None,
    )
    return operation, warnings
