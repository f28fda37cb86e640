"""
Service and storage operation generator: both become Coolify one-click
services created through `/services`.
"""

from typing import Any, Dict, Union

from aspire2coolify.core.models import Service, StorageService, Operation, GenerateOptions
from aspire2coolify.rules.mappings import remote_service_kind

ServiceLike = Union[Service, StorageService]


def service_payload(record: ServiceLike, target: Dict[str, str], instant_deploy=None) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(target)
    payload["type"] = remote_service_kind(record.type)
    payload["name"] = record.name
    payload["instant_deploy"] = True if instant_deploy is None else instant_deploy
    return payload


def generate_service_operation(record: ServiceLike, options: GenerateOptions, category: str = "service") -> Operation:
    label = "Storage" if category == "storage" else "Service"
    return Operation(
        endpoint="/services",
        payload=service_payload(record, options.target_fields(), options.instant_deploy),
        display_name=record.name,
        category=category,
        annotation=f"{label}: {record.name} ({record.type})" if options.include_comments else None,
    )


def generate_storage_operation(storage: StorageService, options: GenerateOptions) -> Operation:
    return generate_service_operation(storage, options, category="storage")
