"""
Shared building blocks for the resource extractors: argument readers and the
MethodRule dispatch machinery that applies a chain's calls to a record.
"""

import re
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, List, Union, Tuple

from aspire2coolify.core.models import MethodCall, EnvironmentVariable, Endpoint, Volume
from aspire2coolify.parser.lexer import extract_first_string_arg, extract_named_args
from aspire2coolify.parser.scanner import LambdaScanner

logger = logging.getLogger("aspire2coolify.extractors")

# Rule modes
OVERWRITE = "overwrite"     # last call wins
ACCUMULATE = "accumulate"   # append to a list attribute, in call order
FLAG = "flag"               # set a boolean, idempotent
REPLAY = "replay"           # lambda argument replayed through the same table

Reader = Callable[[MethodCall], Any]


@dataclass(frozen=True)
class MethodRule:
    attr: Optional[str]
    reader: Optional[Reader]
    mode: str
    # OVERWRITE only: a reader yielding None resets attr instead of keeping it
    clear_on_none: bool = False


RuleTable = Mapping[str, Union[MethodRule, Tuple[MethodRule, ...]]]

_PORT_PREFIX = re.compile(r'^\s*(\d+)')


def strip_quotes(value: Optional[str]) -> str:
    return re.sub(r'["\']', '', value or '').strip()


def parse_port(value: Optional[str]) -> Optional[int]:
    """Leading integer of value; anything non-numeric or zero yields None."""
    if not value:
        return None
    match = _PORT_PREFIX.match(value)
    if not match:
        return None
    port = int(match.group(1))
    return port or None


def string_arg(args: List[str], index: int) -> Optional[str]:
    """A positional argument as a string: literal content, else the bare token."""
    if index >= len(args):
        return None
    return extract_first_string_arg(args[index]) or strip_quotes(args[index]) or None


# --- READERS ---

def first_string(call: MethodCall) -> Optional[str]:
    return extract_first_string_arg(call.raw_args)


def first_positional(call: MethodCall) -> Optional[str]:
    return string_arg(call.args, 0)


def host_port(call: MethodCall) -> Optional[int]:
    return parse_port(call.args[0]) if call.args else None


def constant(value: Any) -> Reader:
    return lambda call: value


def named_arg(key: str) -> Reader:
    return lambda call: extract_named_args(call.args).get(key) or None


def environment_variable(call: MethodCall) -> Optional[EnvironmentVariable]:
    """
    WithEnvironment("KEY", value). A quoted value is a literal; an unquoted
    token is kept trimmed as an expression. Single-argument callback forms
    are skipped.
    """
    if len(call.args) < 2:
        return None
    key = extract_first_string_arg(call.args[0]) or strip_quotes(call.args[0])
    literal = extract_first_string_arg(call.args[1])
    if literal is not None:
        return EnvironmentVariable(key=key, value=literal, is_expression=False)
    return EnvironmentVariable(key=key, value=call.args[1].strip(), is_expression=True)


def http_endpoint(call: MethodCall, protocol: str = "http") -> Endpoint:
    named = extract_named_args(call.args)
    endpoint = Endpoint(protocol=protocol, is_external=False)

    # 1. Positional port (named arguments carry a ':')
    if call.args and ':' not in call.args[0]:
        endpoint.port = parse_port(call.args[0])

    # 2. Named arguments take precedence
    if named.get("port"):
        endpoint.port = parse_port(named["port"])
    if named.get("targetPort"):
        endpoint.target_port = parse_port(named["targetPort"])
    if named.get("name"):
        endpoint.name = named["name"]
    if named.get("env"):
        endpoint.env_variable = named["env"]
    if named.get("isExternal") == "true":
        endpoint.is_external = True
    return endpoint


def https_endpoint(call: MethodCall) -> Endpoint:
    return http_endpoint(call, protocol="https")


def external_endpoint(call: MethodCall) -> Endpoint:
    return Endpoint(protocol="http", is_external=True)


def service_binding(call: MethodCall) -> Optional[Endpoint]:
    port = parse_port(call.args[0]) if call.args else None
    if port is None:
        return None
    return Endpoint(port=port, protocol="http", is_external=False)


def reference_target(call: MethodCall) -> Optional[str]:
    """`db`, `db.Resource` and `"db"` all resolve to the leading identifier."""
    if not call.args:
        return None
    cleaned = strip_quotes(call.args[0])
    return cleaned.split('.')[0] or None


def data_volume(call: MethodCall) -> Volume:
    return Volume(is_data=True, mount_path=extract_first_string_arg(call.raw_args))


def bind_mount(call: MethodCall) -> Optional[Volume]:
    if len(call.args) < 2:
        return None
    return Volume(is_data=False, name=string_arg(call.args, 0), mount_path=string_arg(call.args, 1))


# --- DISPATCH ---

def apply_method_rules(record: Any, calls: List[MethodCall], rules: RuleTable,
                       scanner: Optional[LambdaScanner] = None, depth: int = 0) -> Any:
    """
    Applies every recognized call to record according to its rule mode.
    Unrecognized methods are ignored.
    """
    scanner = scanner or LambdaScanner()
    for call in calls:
        entry = rules.get(call.method)
        if entry is None:
            continue
        for rule in ((entry,) if isinstance(entry, MethodRule) else entry):
            _apply_rule(record, call, rule, rules, scanner, depth)
    return record


def _apply_rule(record, call, rule, rules, scanner, depth):
    if rule.mode == REPLAY:
        nested = scanner.scan(call.raw_args, depth)
        apply_method_rules(record, nested, rules, scanner, depth + 1)
        return

    if rule.mode == FLAG:
        setattr(record, rule.attr, True)
        return

    value = rule.reader(call)
    if value is None:
        if rule.clear_on_none:
            setattr(record, rule.attr, None)
        return

    if rule.mode == OVERWRITE:
        setattr(record, rule.attr, value)
    elif rule.mode == ACCUMULATE:
        bucket = getattr(record, rule.attr)
        if bucket is None:
            bucket = []
            setattr(record, rule.attr, bucket)
        bucket.append(value)
    else:
        raise ValueError(f"Unknown rule mode '{rule.mode}' for {call.method}")
