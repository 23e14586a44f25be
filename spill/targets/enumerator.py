"""
Spill Address Enumerator

Turns a target specification into the ordered list of addresses to notify.

A specification is one of:
1. A single dotted-quad address      192.168.1.10
2. A CIDR block                      192.168.1.0/24
3. A file with one of the above per line

CIDR expansion includes the network and broadcast addresses. Nothing is
deduplicated. Any malformed entry aborts the whole run.
"""

from __future__ import annotations
import ipaddress
import logging
import os
import re
from typing import Iterator, List

from spill.errors import InvalidTargetError, TargetFileError

logger = logging.getLogger(__name__)

IP_PATTERN = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
CIDR_PATTERN = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}/\d{1,2}$")

COMMENT_PREFIX = "#"


def is_single_address(spec: str) -> bool:
    return bool(IP_PATTERN.match(spec))


def is_cidr(spec: str) -> bool:
    return bool(CIDR_PATTERN.match(spec))


def parse_address(spec: str) -> str:
    """Validate a dotted quad and return its canonical form."""
    try:
        return str(ipaddress.IPv4Address(spec))
    except ipaddress.AddressValueError as e:
        raise InvalidTargetError(spec, str(e))


def iter_cidr(cidr: str) -> Iterator[str]:
    """
    Yield every address in a CIDR block in ascending order.

    Host bits in the base address are masked off, so 10.0.0.5/30 walks
    10.0.0.4 .. 10.0.0.7.
    """
    try:
        network = ipaddress.IPv4Network(cidr, strict=False)
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError) as e:
        raise InvalidTargetError(cidr, str(e))

    for address in network:
        yield str(address)


def expand_cidr(cidr: str) -> List[str]:
    """Return every address in a CIDR block, network and broadcast included."""
    return list(iter_cidr(cidr))


def read_target_file(path: str) -> List[str]:
    """
    Read target entries from a file.

    Blank lines and lines starting with '#' are skipped; everything else
    is returned stripped, in file order.
    """
    return [entry for _, entry in _numbered_entries(path)]


def _expand_file(path: str) -> Iterator[str]:
    for lineno, entry in _numbered_entries(path):
        if is_cidr(entry):
            yield from iter_cidr(entry)
        elif is_single_address(entry):
            yield from iter_cidr(f"{entry}/32")
        else:
            raise InvalidTargetError(entry, f"{path}:{lineno}: expected an address or CIDR block")


def _numbered_entries(path: str) -> Iterator[tuple]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise TargetFileError(path, str(e))

    for lineno, line in enumerate(lines, start=1):
        entry = line.strip()
        if entry and not entry.startswith(COMMENT_PREFIX):
            yield lineno, entry


def looks_like_path(spec: str) -> bool:
    return os.sep in spec or "/" in spec or os.path.exists(spec)


def iter_targets(spec: str) -> Iterator[str]:
    """Lazily yield the addresses implied by a target specification."""
    spec = spec.strip() if spec else ""

    if not spec:
        raise InvalidTargetError(spec, "no target specified")

    if is_single_address(spec):
        logger.info(f"Scanning IP address: {spec}")
        yield parse_address(spec)
        return

    if is_cidr(spec):
        logger.info(f"Scanning IP network {spec}")
        yield from iter_cidr(spec)
        return

    if looks_like_path(spec):
        if not os.path.isfile(spec):
            raise TargetFileError(spec, "no such file")
        logger.info(f"Reading targets from {spec}")
        yield from _expand_file(spec)
        return

    raise InvalidTargetError(spec)


def enumerate_targets(spec: str) -> List[str]:
    """
    Return the ordered list of addresses for a target specification.

    Raises:
        InvalidTargetError: Unrecognized specification or malformed entry
        TargetFileError: Target file missing or unreadable
    """
    addresses = list(iter_targets(spec))
    logger.debug(f"Enumerated {len(addresses)} addresses from {spec!r}")
    return addresses
