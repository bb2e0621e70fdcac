"""IP address helpers shared by the value decoder and the IP config parser."""

from __future__ import annotations

import ipaddress

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def ip_sort_key(ip: IPAddress) -> bytes:
    """Return a sort key for an IPv4 or IPv6 address.

    IPv4 addresses are compared in their IPv4-mapped IPv6 form, so a
    mixed list sorts byte-wise over a single 16-byte representation.

    >>> from ipaddress import ip_address
    >>> ip_sort_key(ip_address('192.0.2.1')).hex()
    '00000000000000000000ffffc0000201'
    >>> [str(a) for a in sorted(map(ip_address, ['192.0.2.10', '192.0.2.9']), key=ip_sort_key)]
    ['192.0.2.9', '192.0.2.10']
    """
    if ip.version == 4:
        return b"\x00" * 10 + b"\xff\xff" + ip.packed
    return ip.packed


def cidr_mask(prefixlen: int, bits: int) -> IPAddress:
    """Build a network mask of prefixlen ones in a bits-wide address.

    Raises ValueError if bits is not 32 or 128, or prefixlen is out of
    range for it.

    >>> cidr_mask(24, 32)
    IPv4Address('255.255.255.0')
    >>> cidr_mask(64, 128)
    IPv6Address('ffff:ffff:ffff:ffff::')
    """
    if bits == 32:
        cls = ipaddress.IPv4Address
    elif bits == 128:
        cls = ipaddress.IPv6Address
    else:
        raise ValueError(f"mask width must be 32 or 128 bits, got {bits}")
    if not 0 <= prefixlen <= bits:
        raise ValueError(f"prefix length {prefixlen} out of range for {bits}-bit mask")
    all_ones = (1 << bits) - 1
    return cls(all_ones ^ (all_ones >> prefixlen))
