from __future__ import annotations

import ipaddress
import secrets
from functools import lru_cache

from fastapi import Request

INTERNAL_TOKEN_HEADER = "X-Internal-Token"

IpNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def is_valid_internal_token(*, expected_token: str, received_token: str | None) -> bool:
    if not expected_token or not received_token:
        return False
    return secrets.compare_digest(expected_token, received_token)


def is_internal_request_authenticated(request: Request, *, expected_token: str) -> bool:
    return is_valid_internal_token(
        expected_token=expected_token,
        received_token=request.headers.get(INTERNAL_TOKEN_HEADER),
    )


@lru_cache(maxsize=32)
def _parse_networks(raw_networks: str) -> tuple[IpNetwork, ...]:
    """Comma-separated CIDRs or bare addresses; unparsable entries are skipped."""
    networks: list[IpNetwork] = []
    for chunk in raw_networks.split(","):
        entry = chunk.strip()
        if not entry:
            continue
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            continue
    return tuple(networks)


def _normalize_ip(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


def extract_client_ip(request: Request, *, trusted_proxies: str = "") -> str | None:
    peer_ip = _normalize_ip(request.client.host if request.client is not None else None)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if not forwarded_for:
        return peer_ip
    # Forwarded addresses count only when the direct peer is a proxy we run.
    if not is_client_ip_allowed(client_ip=peer_ip, allowlist=trusted_proxies):
        return peer_ip
    return _normalize_ip(forwarded_for.split(",", maxsplit=1)[0])


def is_client_ip_allowed(*, client_ip: str | None, allowlist: str) -> bool:
    normalized = _normalize_ip(client_ip)
    if normalized is None:
        return False
    address = ipaddress.ip_address(normalized)
    return any(address in network for network in _parse_networks(allowlist))
