# aca_capacity/subnet.py
#
# Subnet size parsing: "/N", "N" or a dotted-decimal netmask.

import ipaddress
import logging
from typing import Optional

from .settings import RESERVED_IPS

logger = logging.getLogger(__name__)


def parse_prefix_length(subnet: Optional[str]) -> Optional[int]:
    """
    Convert a subnet size string to an IPv4 prefix length.

    Returns None for anything that is not a prefix in 0..32 or a valid
    (contiguous) netmask.
    """
    if subnet is None:
        return None

    text = str(subnet).strip()
    if text.startswith("/"):
        text = text[1:].strip()
    if not text:
        return None

    if text.isascii() and text.isdigit():
        prefix = int(text)
        return prefix if 0 <= prefix <= 32 else None

    if text.count(".") != 3:
        return None

    try:
        # Counts the mask's set bits and rejects non-contiguous masks
        network = ipaddress.IPv4Network(f"0.0.0.0/{text}")
        mask = ipaddress.IPv4Address(text)
    except ValueError:
        logger.debug("Unparseable netmask %r", subnet)
        return None

    # ipaddress also takes host masks (0.0.0.255); those are not netmasks
    if network.netmask != mask:
        return None
    return network.prefixlen


def ips_for_prefix(prefix_length: int, reserved_ips: int = RESERVED_IPS) -> int:
    return 2 ** (32 - prefix_length) - reserved_ips


def available_ips(subnet: Optional[str], reserved_ips: int = RESERVED_IPS) -> Optional[int]:
    prefix = parse_prefix_length(subnet)
    if prefix is None:
        return None
    return ips_for_prefix(prefix, reserved_ips)
