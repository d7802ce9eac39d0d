"""Tests for lease decoding."""

import uuid
from datetime import datetime, timezone

import pytest

from uls_exporter.leases import (
    EntitlementContext,
    LeaseRecord,
    decode_leases,
    format_timestamp,
    parse_timestamp,
)

LEASE = {
    "floatingLeaseId": 17,
    "token": "3f2b8c1e-6a4d-4b7e-9c2f-1d5e8a7b6c40",
    "createdTimeUtc": "2024-03-01T08:15:30.123456Z",
    "lastRenewalTimeUtc": "2024-03-01T10:15:30+02:00",
    "isRevoked": False,
    "clientEntitlementContext": {
        "EnvironmentDomain": "CORP",
        "EnvironmentHostname": "build-07",
        "EnvironmentUser": "ci",
        "Legacy.MachineBinding1": "abc",
        "Legacy.MachineBinding2": "BUILD-07",
        "Legacy.MachineBinding5": "",
    },
    "entitlementGroupIds": ["pro-floating", "plus-floating"],
}


def test_decode_full_lease():
    lease = LeaseRecord.from_dict(LEASE)
    assert lease.lease_id == 17
    assert lease.token == uuid.UUID("3f2b8c1e-6a4d-4b7e-9c2f-1d5e8a7b6c40")
    assert lease.created_at == datetime(2024, 3, 1, 8, 15, 30, 123456, tzinfo=timezone.utc)
    assert lease.is_revoked is False
    assert lease.entitlement_context.environment_hostname == "build-07"
    assert lease.entitlement_context.legacy_machine_binding2 == "BUILD-07"
    assert lease.entitlement_group_ids == ["pro-floating", "plus-floating"]


def test_timestamps_are_populated_and_normalised_to_utc():
    lease = LeaseRecord.from_dict(LEASE)
    assert lease.last_renewed_at == datetime(2024, 3, 1, 8, 15, 30, tzinfo=timezone.utc)
    assert lease.last_renewed_at.utcoffset().total_seconds() == 0


def test_missing_and_null_fields_fall_back_to_zero_values():
    lease = LeaseRecord.from_dict({"floatingLeaseId": 3, "token": None})
    assert lease.lease_id == 3
    assert lease.token == uuid.UUID(int=0)
    assert lease.created_at is None
    assert lease.last_renewed_at is None
    assert lease.is_revoked is False
    assert lease.entitlement_context == EntitlementContext()
    assert lease.entitlement_group_ids == []


def test_keys_match_ignoring_case():
    lease = LeaseRecord.from_dict({
        "FloatingLeaseID": 9,
        "ISREVOKED": True,
        "cliententitlementcontext": {"environmenthostname": "build-09"},
    })
    assert lease.lease_id == 9
    assert lease.is_revoked is True
    assert lease.entitlement_context.environment_hostname == "build-09"


def test_exact_key_wins_over_case_variant():
    lease = LeaseRecord.from_dict({"FLOATINGLEASEID": 1, "floatingLeaseId": 2})
    assert lease.lease_id == 2


def test_null_timestamps_decode_to_none():
    lease = LeaseRecord.from_dict(dict(LEASE, createdTimeUtc=None, lastRenewalTimeUtc=None))
    assert lease.created_at is None
    assert lease.last_renewed_at is None


def test_unknown_fields_are_ignored():
    lease = LeaseRecord.from_dict(dict(LEASE, somethingNew=[1, 2, 3]))
    assert lease.lease_id == 17


@pytest.mark.parametrize(
    "key, value",
    [
        ("floatingLeaseId", "17"),
        ("floatingLeaseId", 17.5),
        ("floatingLeaseId", True),
        ("isRevoked", 0),
        ("token", "not-a-uuid"),
        ("createdTimeUtc", "2024-03-01 08:15:30"),
        ("clientEntitlementContext", ["CORP"]),
        ("entitlementGroupIds", "pro-floating"),
        ("entitlementGroupIds", ["ok", 5]),
    ],
)
def test_type_mismatch_raises(key, value):
    with pytest.raises(ValueError):
        LeaseRecord.from_dict(dict(LEASE, **{key: value}))


def test_entitlement_context_type_mismatch_raises():
    with pytest.raises(ValueError):
        EntitlementContext.from_dict({"EnvironmentUser": 42})


def test_decode_leases_counts_records():
    assert len(decode_leases([LEASE, dict(LEASE, floatingLeaseId=18)])) == 2


def test_decode_leases_empty_and_null():
    assert decode_leases([]) == []
    assert decode_leases(None) == []


def test_decode_leases_rejects_non_array():
    with pytest.raises(ValueError):
        decode_leases({"leases": []})


def test_decode_leases_rejects_non_object_items():
    with pytest.raises(ValueError):
        decode_leases([LEASE, "oops"])


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_timestamp("2024-01-02T03:04:05.5Z").microsecond == 500000
    # extra precision is truncated to microseconds
    assert parse_timestamp("2024-01-02T03:04:05.123456789Z").microsecond == 123456
    assert parse_timestamp("2024-01-02T03:04:05-05:30") == datetime(2024, 1, 2, 8, 34, 5, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value",
    ["", "2024-01-02", "2024-01-02T03:04:05", "2024-13-02T03:04:05Z", "2024-01-02T03:04:05+0200"],
)
def test_parse_timestamp_rejects_bad_input(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_format_timestamp():
    assert format_timestamp(None) == ""
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)) == "2024-01-02T03:04:05Z"
