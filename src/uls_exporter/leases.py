"""
Lease records as returned by the ULS admin API (GET /v1/admin/lease).

Decoding follows the server's JSON shape: missing keys and nulls fall
back to zero values, keys match ignoring case when there is no exact
match, unknown keys are ignored, and a value of the wrong type raises
ValueError. Only the number of leases feeds the metrics; the
remaining fields are kept for the `leases` CLI listing.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

# 2006-01-02T15:04:05.999999Z07:00
_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: str) -> datetime:
    """Parse a ULS timestamp into an aware datetime in UTC."""
    match = _TIMESTAMP_RE.match(value)
    if not match:
        raise ValueError(f"invalid timestamp {value!r}")

    year, month, day, hour, minute, second, frac, offset = match.groups()
    # Nanosecond precision is allowed on the wire; datetime stops at micro.
    micro = int((frac or "0").ljust(6, "0")[:6])

    if offset == "Z":
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid timezone offset in {value!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    parsed = datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second), micro,
        tzinfo=tz,
    )
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> str:
    """ISO-8601 in UTC with a trailing Z; empty string when the lease has no timestamp."""
    if value is None:
        return ""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _lookup(data: Dict[str, Any], key: str) -> Any:
    """Exact key first, then the first key equal to it ignoring case."""
    if key in data:
        return data[key]
    folded = key.casefold()
    for name, value in data.items():
        if name.casefold() == folded:
            return value
    return None


def _get(data: Dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = _lookup(data, key)
    if value is None:
        return default
    # bool is an int subclass, but JSON keeps them apart
    if isinstance(value, bool) and expected is not bool:
        raise ValueError(f"field {key!r}: expected {expected.__name__}, got bool")
    if not isinstance(value, expected):
        raise ValueError(
            f"field {key!r}: expected {expected.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class EntitlementContext:
    """Client environment the lease was issued to. Opaque passthrough."""

    environment_domain: str = ""
    environment_hostname: str = ""
    environment_user: str = ""
    legacy_machine_binding1: str = ""
    legacy_machine_binding2: str = ""
    legacy_machine_binding5: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EntitlementContext:
        return cls(
            environment_domain=_get(data, "EnvironmentDomain", str, ""),
            environment_hostname=_get(data, "EnvironmentHostname", str, ""),
            environment_user=_get(data, "EnvironmentUser", str, ""),
            legacy_machine_binding1=_get(data, "Legacy.MachineBinding1", str, ""),
            legacy_machine_binding2=_get(data, "Legacy.MachineBinding2", str, ""),
            legacy_machine_binding5=_get(data, "Legacy.MachineBinding5", str, ""),
        )


@dataclass(frozen=True)
class LeaseRecord:
    """A single floating-license lease held by a client."""

    lease_id: int = 0
    token: uuid.UUID = uuid.UUID(int=0)
    created_at: Optional[datetime] = None
    last_renewed_at: Optional[datetime] = None
    is_revoked: bool = False
    entitlement_context: EntitlementContext = field(default_factory=EntitlementContext)
    entitlement_group_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> LeaseRecord:
        if not isinstance(data, dict):
            raise ValueError(f"lease must be an object, got {type(data).__name__}")

        token_str = _get(data, "token", str, None)
        try:
            token = uuid.UUID(token_str) if token_str is not None else uuid.UUID(int=0)
        except ValueError:
            raise ValueError(f"field 'token': invalid UUID {token_str!r}") from None

        created = _get(data, "createdTimeUtc", str, None)
        renewed = _get(data, "lastRenewalTimeUtc", str, None)

        group_ids = _get(data, "entitlementGroupIds", list, [])
        for group_id in group_ids:
            if not isinstance(group_id, str):
                raise ValueError(
                    f"field 'entitlementGroupIds': expected str items, got {type(group_id).__name__}"
                )

        return cls(
            lease_id=_get(data, "floatingLeaseId", int, 0),
            token=token,
            created_at=parse_timestamp(created) if created is not None else None,
            last_renewed_at=parse_timestamp(renewed) if renewed is not None else None,
            is_revoked=_get(data, "isRevoked", bool, False),
            entitlement_context=EntitlementContext.from_dict(
                _get(data, "clientEntitlementContext", dict, {})
            ),
            entitlement_group_ids=list(group_ids),
        )


def decode_leases(payload: Any) -> List[LeaseRecord]:
    """Decode the parsed JSON body of /v1/admin/lease. null counts as no leases."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array of leases, got {type(payload).__name__}")
    return [LeaseRecord.from_dict(item) for item in payload]
