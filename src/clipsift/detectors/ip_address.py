"""IPv4 / IPv6 literal detector."""

from __future__ import annotations

import ipaddress
import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import IpAddressDetection

_IPV4_RE: re.Pattern[str] = re.compile(r"(?<![\w.])(\d{1,3}(?:\.\d{1,3}){3})(?!\w|\.\d)")
_IPV6_RE: re.Pattern[str] = re.compile(
    r"(?<![\w:.])([0-9A-Fa-f]{0,4}(?::[0-9A-Fa-f]{0,4}){2,7})(?![\w:])"
)

# RFC 1918 for v4, unique-local for v6. ipaddress.is_private is broader
# (documentation and benchmark ranges) than what a user means by "private".
_PRIVATE_NETS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("fc00::/7"),
)


def _is_private(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return any(addr.version == net.version and addr in net for net in _PRIVATE_NETS)


class IpAddressDetector(BaseDetector):
    """Find IP literals and flag private, loopback, link-local and multicast ranges."""

    family = "ipAddresses"

    def detect(self, text: str) -> list[IpAddressDetection]:
        seen: set[str] = set()
        out: list[IpAddressDetection] = []

        for raw, span in self._iter_matches(_IPV4_RE, text, group=1):
            try:
                addr = ipaddress.IPv4Address(raw)
            except ValueError:
                continue
            self._add(out, seen, addr, span, confidence=0.9)

        if ":" in text:
            for raw, span in self._iter_matches(_IPV6_RE, text, group=1):
                if not re.search(r"[0-9A-Fa-f]", raw):
                    continue
                try:
                    addr6 = ipaddress.IPv6Address(raw)
                except ValueError:
                    continue
                self._add(out, seen, addr6, span, confidence=0.85)

        out.sort(key=lambda d: d.span[0])
        return out

    @staticmethod
    def _add(
        out: list[IpAddressDetection],
        seen: set[str],
        addr: ipaddress.IPv4Address | ipaddress.IPv6Address,
        span: tuple[int, int],
        confidence: float,
    ) -> None:
        address = str(addr)
        if address in seen:
            return
        seen.add(address)
        out.append(
            IpAddressDetection(
                address=address,
                version=f"v{addr.version}",
                is_private=_is_private(addr),
                is_loopback=addr.is_loopback,
                is_link_local=addr.is_link_local,
                is_multicast=addr.is_multicast,
                confidence=confidence,
                span=span,
            )
        )
