from typing import Mapping


def normalize_ip(ip: str | None) -> str:
    if not ip:
        return "unknown"
    ip = ip.strip()
    if ip == "::1":
        return "127.0.0.1"
    if ip.lower().startswith("::ffff:"):
        return ip[7:]
    return ip


def get_client_ip(headers: Mapping[str, str], remote_addr: str | None) -> str:
    """
    Resolves the client address behind reverse proxies.

    Order: first X-Forwarded-For hop, X-Real-IP, X-Client-IP, then the peer address.
    Header lookup is case-insensitive.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    forwarded_for = lowered.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return normalize_ip(first_hop)
    for header in ("x-real-ip", "x-client-ip"):
        value = lowered.get(header)
        if value and value.strip():
            return normalize_ip(value)
    return normalize_ip(remote_addr)
