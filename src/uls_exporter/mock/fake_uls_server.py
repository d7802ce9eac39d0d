"""
Fake ULS admin API for testing without a license server.

    python -m uls_exporter.mock.fake_uls_server
    uls-exporter -uri http://127.0.0.1:8080
"""

from __future__ import annotations

import json
import random
import uuid
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Type

LEASE_PATH = "/v1/admin/lease"

_rng = random.Random(42)


def sample_lease(lease_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """A lease object shaped like the real admin API's."""
    now = now or datetime.now(timezone.utc)
    created = now - timedelta(minutes=_rng.randint(5, 600))
    renewed = now - timedelta(seconds=_rng.randint(0, 300))
    host = f"build-agent-{lease_id:02d}"
    return {
        "floatingLeaseId": lease_id,
        "token": str(uuid.UUID(int=_rng.getrandbits(128), version=4)),
        "createdTimeUtc": created.strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
        "lastRenewalTimeUtc": renewed.strftime("%Y-%m-%dT%H:%M:%S.%f+00:00"),
        "isRevoked": False,
        "clientEntitlementContext": {
            "EnvironmentDomain": "CORP",
            "EnvironmentHostname": host,
            "EnvironmentUser": "ci",
            "Legacy.MachineBinding1": uuid.UUID(int=lease_id).hex,
            "Legacy.MachineBinding2": host.upper(),
            "Legacy.MachineBinding5": "",
        },
        "entitlementGroupIds": ["unity-pro-floating"],
    }


def sample_leases(count: int) -> List[Dict[str, Any]]:
    return [sample_lease(i + 1) for i in range(count)]


class _LeaseHandler(BaseHTTPRequestHandler):
    # Overridden per server by make_handler()
    status = 200
    body = b"[]"

    def do_GET(self):
        if self.path != LEASE_PATH:
            self.send_response(404)
            self.end_headers()
            return

        self.send_response(self.status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def make_handler(payload: Any = None, status: int = 200, raw: Optional[bytes] = None) -> Type[BaseHTTPRequestHandler]:
    """Handler class answering GET /v1/admin/lease with `payload` as JSON, or `raw` bytes verbatim."""
    body = raw if raw is not None else json.dumps(payload if payload is not None else []).encode()
    return type("LeaseHandler", (_LeaseHandler,), {"status": status, "body": body})


def run_fake_server(host: str = "127.0.0.1", port: int = 8080, lease_count: int = 3):
    server = ThreadingHTTPServer((host, port), make_handler(sample_leases(lease_count)))
    print(f"Fake ULS server running at http://{host}:{port}{LEASE_PATH} ({lease_count} leases)")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
