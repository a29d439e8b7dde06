"""Probe target validation: pure syntax checks, no DNS lookups."""

from __future__ import annotations

import ipaddress
import re

from probe_engine.engine.errors import InvalidTargetError

MAX_DOMAIN_LENGTH = 253

_DOMAIN_RE = re.compile(r"([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}")


def is_ipv4(target: str) -> bool:
    if ":" in target:
        return False
    try:
        ipaddress.IPv4Address(target)
    except ValueError:
        return False
    return True


def is_domain(target: str) -> bool:
    return len(target) <= MAX_DOMAIN_LENGTH and _DOMAIN_RE.fullmatch(target) is not None


def validate_target(target: str) -> bool:
    """Return True if *target* may be handed to a diagnostic tool."""
    return bool(target) and (is_ipv4(target) or is_domain(target))


def ensure_valid_target(target: str) -> str:
    if not validate_target(target):
        raise InvalidTargetError(target)
    return target
