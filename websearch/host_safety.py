"""
Host safety: keep results pointing at internal networks away from callers.

A URL is unsafe when its scheme is not http(s) or when its host is, in any
textual encoding, a loopback, private, link-local, carrier-grade NAT,
benchmark or cloud-metadata address. Hostnames are classified as written;
nothing is resolved through DNS.

Non-ASCII hosts are first converted with the IDNA codec, so full-width
digits and letters and ideographic dots are classified as the ASCII host
they resolve to.

Resolution order (first match wins):
  1. Non-http(s) scheme
  2. Symbolic denylist (localhost, metadata host, ...)
  3. IPv4 literal in a reserved prefix
  4. IPv6 loopback / unique-local / link-local literal
  5. IPv4-mapped, -compatible, -translated or NAT64 IPv6 literal embedding
     a reserved IPv4 address
  6. Bare decimal or hex integer host decoding to a reserved address
  7. Shorthand / octal / hex-octet IPv4 forms decoding to a reserved address

Anything that cannot be parsed is unsafe.
"""

from __future__ import annotations

import ipaddress
import logging
import re
from typing import Iterable, List, Optional, Set, Tuple
from urllib.parse import urlsplit

from .client import SearchResult

logger = logging.getLogger(__name__)


ALLOWED_SCHEMES: Set[str] = {"http", "https"}

PRIVATE_HOSTS: Set[str] = {
    "localhost",
    "127.0.0.1",
    "::1",
    "0.0.0.0",
    "metadata.google.internal",
    "169.254.169.254",
}

PRIVATE_CIDR_PREFIXES: Tuple[str, ...] = (
    "10.",
    "127.",
    "169.254.",
    "172.16.",
    "172.17.",
    "172.18.",
    "172.19.",
    "172.20.",
    "172.21.",
    "172.22.",
    "172.23.",
    "172.24.",
    "172.25.",
    "172.26.",
    "172.27.",
    "172.28.",
    "172.29.",
    "172.30.",
    "172.31.",
    "192.168.",
    "0.",
    "100.64.",  # carrier-grade NAT
    "198.18.",  # benchmark
    "198.19.",
)

_MAPPED_HEX_RE = re.compile(r"^::ffff:([0-9a-f]{1,4}):([0-9a-f]{1,4})$", re.IGNORECASE)
_MAPPED_DOTTED_RE = re.compile(r"^::ffff:(\d{1,3}(?:\.\d{1,3}){3})$", re.IGNORECASE)
_DECIMAL_RE = re.compile(r"^\d+$")
_HEX_RE = re.compile(r"^0x[0-9a-f]+$", re.IGNORECASE)
_NUMERIC_PART_RE = re.compile(r"^(?:0x[0-9a-f]*|\d+)$", re.IGNORECASE)

_MAX_IPV4 = 0xFFFFFFFF

_IPV4_EMBEDDING_NETWORKS = (
    ipaddress.IPv6Network("::/96"),  # IPv4-compatible
    ipaddress.IPv6Network("64:ff9b::/96"),  # NAT64
    ipaddress.IPv6Network("::ffff:0:0:0/96"),  # IPv4-translated
)


class _InvalidHost(ValueError):
    """Host looks numeric but is not a well-formed address."""


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def is_private_url(url: str) -> bool:
    """Return True if ``url`` must not be handed back to a caller."""
    try:
        return _classify(url)
    except Exception:
        return True


def filter_results(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Drop results whose URL is unsafe, keeping the order of the rest."""
    kept: List[SearchResult] = []
    dropped = 0
    for r in results:
        if is_private_url(r.url):
            dropped += 1
            continue
        kept.append(r)
    if dropped:
        logger.warning("Dropped %d result(s) pointing at private or non-http(s) URLs", dropped)
    return kept


# ------------------------------------------------------------------
# Classification
# ------------------------------------------------------------------

def _classify(url: str) -> bool:
    parsed = urlsplit(url.strip())

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return True

    netloc = parsed.netloc
    # A backslash or whitespace ends the authority for some URL parsers,
    # so the host they see may differ from ours.
    if not netloc or "\\" in netloc or any(ch.isspace() for ch in netloc):
        return True

    hostname = parsed.hostname
    if not hostname:
        return True
    _port = parsed.port  # raises ValueError on a malformed port

    # hostname is already lower-cased and bracket-stripped
    bare = _to_ascii_host(hostname).rstrip(".")
    if not bare:
        return True

    if bare in PRIVATE_HOSTS:
        return True

    ip = _parse_ip(bare)
    if isinstance(ip, ipaddress.IPv4Address):
        return _is_reserved_ipv4(str(ip))
    if isinstance(ip, ipaddress.IPv6Address):
        if _is_private_ipv6(bare, ip):
            return True
        mapped = _extract_mapped_ipv4(bare, ip) or _extract_embedded_ipv4(ip)
        if mapped and _is_reserved_ipv4(mapped):
            return True
        return False

    if _is_numeric_private_ip(bare):
        return True

    try:
        loose = _parse_loose_ipv4(bare)
    except _InvalidHost:
        return True
    if loose is not None:
        return _is_reserved_ipv4(loose)

    return False


def _to_ascii_host(hostname: str) -> str:
    """
    Map a Unicode host to the ASCII form an HTTP client would connect to.

    The IDNA codec folds full-width characters (NFKC) and treats U+3002,
    U+FF0E and U+FF61 as label separators, so ``１２７。０。０。１`` becomes
    ``127.0.0.1``. Raises UnicodeError for hosts that cannot be encoded.
    """
    if hostname.isascii():
        return hostname
    return hostname.encode("idna").decode("ascii").lower()


def _parse_ip(host: str):
    # Strip an IPv6 zone id ("fe80::1%eth0" / "%25eth0")
    candidate = host.split("%", 1)[0] if ":" in host else host
    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        return None


def _is_reserved_ipv4(dotted: str) -> bool:
    if dotted in PRIVATE_HOSTS:
        return True
    return any(dotted.startswith(prefix) for prefix in PRIVATE_CIDR_PREFIXES)


def _is_private_ipv6(bare: str, ip: ipaddress.IPv6Address) -> bool:
    lower = bare.lower()
    if lower == "::1" or ip.is_loopback or ip.is_unspecified:
        return True
    if lower.startswith("fc") or lower.startswith("fd"):
        return True
    if lower.startswith("fe80") or ip.is_link_local:
        return True
    return False


def _extract_mapped_ipv4(bare: str, ip: Optional[ipaddress.IPv6Address] = None) -> Optional[str]:
    """
    Return the dotted-quad embedded in an IPv4-mapped IPv6 host.

    Accepts ``::ffff:a.b.c.d`` and ``::ffff:hhhh:hhhh`` as well as any other
    spelling ``ipaddress`` recognises as mapped.
    """
    match = _MAPPED_HEX_RE.match(bare)
    if match:
        hi = int(match.group(1), 16)
        lo = int(match.group(2), 16)
        return f"{(hi >> 8) & 0xFF}.{hi & 0xFF}.{(lo >> 8) & 0xFF}.{lo & 0xFF}"

    match = _MAPPED_DOTTED_RE.match(bare)
    if match:
        return match.group(1)

    if ip is not None and ip.ipv4_mapped is not None:
        return str(ip.ipv4_mapped)
    return None


def _extract_embedded_ipv4(ip: ipaddress.IPv6Address) -> Optional[str]:
    """Low 32 bits of an IPv4-compatible, NAT64 or IPv4-translated address."""
    if any(ip in net for net in _IPV4_EMBEDDING_NETWORKS):
        return _int_to_dotted(int(ip) & _MAX_IPV4)
    return None


def _is_numeric_private_ip(host: str) -> bool:
    """
    Detect single-integer hosts (``2130706433``, ``0x7f000001``).

    Both encodings are checked against the full reserved range set. A
    leading-zero decimal string is also read as octal, the way
    ``inet_aton`` would. Values outside 32 bits are not valid hosts and are
    treated as unsafe.
    """
    candidates: List[int] = []
    if _DECIMAL_RE.match(host):
        candidates.append(int(host, 10))
        if len(host) > 1 and host.startswith("0"):
            try:
                candidates.append(int(host, 8))
            except ValueError:
                pass
    elif _HEX_RE.match(host):
        candidates.append(int(host, 16))
    else:
        return False

    for num in candidates:
        if num < 0 or num > _MAX_IPV4:
            return True
        if _is_reserved_ipv4(_int_to_dotted(num)):
            return True
    return False


def _parse_loose_ipv4(host: str) -> Optional[str]:
    """
    Normalise dotted IPv4 spellings that ``ipaddress`` rejects.

    Handles shorthand (``127.1``), octal (``0177.0.0.1``) and hex octets
    (``0x7f.0.0.1``). Returns None for ordinary domain names and raises
    _InvalidHost for numeric-looking hosts that are not valid addresses.
    """
    parts = host.split(".")
    if not _NUMERIC_PART_RE.match(parts[-1]):
        return None
    if len(parts) > 4 or any(p == "" for p in parts):
        raise _InvalidHost(host)

    numbers = [_parse_ipv4_part(p) for p in parts]
    for n in numbers[:-1]:
        if n > 0xFF:
            raise _InvalidHost(host)
    last_limit = 256 ** (5 - len(numbers))
    if numbers[-1] >= last_limit:
        raise _InvalidHost(host)

    value = numbers[-1]
    for i, n in enumerate(numbers[:-1]):
        value += n << (8 * (3 - i))
    return _int_to_dotted(value)


def _parse_ipv4_part(part: str) -> int:
    if not _NUMERIC_PART_RE.match(part):
        raise _InvalidHost(part)
    lower = part.lower()
    if lower.startswith("0x"):
        return int(lower[2:] or "0", 16)
    if len(part) > 1 and part.startswith("0"):
        try:
            return int(part, 8)
        except ValueError:
            raise _InvalidHost(part)
    return int(part, 10)


def _int_to_dotted(num: int) -> str:
    return f"{(num >> 24) & 0xFF}.{(num >> 16) & 0xFF}.{(num >> 8) & 0xFF}.{num & 0xFF}"
