from __future__ import annotations

import re
from dataclasses import dataclass

from pcaphost.utils.errors import HostFormatError

FIELD_SEPARATOR = ","
_PROTOCOL_VALUE = re.compile(r"[0-9]{1,3}")

# IANA assigned internet protocol numbers (names as capture libraries print them)
IP_PROTOCOL_NAMES = {
    0: "IPv6 Hop-by-Hop Option",
    1: "ICMPv4",
    2: "IGMP",
    3: "GGP",
    4: "IPv4",
    5: "ST",
    6: "TCP",
    8: "EGP",
    9: "IGP",
    17: "UDP",
    27: "RDP",
    33: "DCCP",
    41: "IPv6",
    43: "Routing Header for IPv6",
    44: "Fragment Header for IPv6",
    46: "RSVP",
    47: "GRE",
    50: "ESP",
    51: "AH",
    58: "ICMPv6",
    59: "No Next Header for IPv6",
    60: "Destination Options for IPv6",
    88: "EIGRP",
    89: "OSPF",
    94: "IPIP",
    103: "PIM",
    112: "VRRP",
    115: "L2TP",
    132: "SCTP",
    135: "Mobility Header",
    136: "UDP-Lite",
    137: "MPLS in IP",
}

UNKNOWN_PROTOCOL = "unknown"


def protocol_name(value: int) -> str:
    return IP_PROTOCOL_NAMES.get(value, UNKNOWN_PROTOCOL)


@dataclass(frozen=True)
class HostRecord:
    """
    One destination host observed in IPv4 traffic.
    `address` is the store key; `host` equals `address` when no name is known.
    """
    address: str
    host: str
    protocol_value: int
    protocol_name: str

    def __post_init__(self):
        value = self.protocol_value
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
            raise ValueError(f"protocol value must be an integer 0-255, got {value!r}")

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "host": self.host,
            "protocolValue": self.protocol_value,
            "protocolName": self.protocol_name,
        }


def serialize(record: HostRecord) -> str:
    """
    Join the four fields with commas in fixed order.
    Commas inside `host` or `protocol_name` are not escaped.
    """
    return FIELD_SEPARATOR.join(
        (record.address, record.host, str(record.protocol_value), record.protocol_name)
    )


def deserialize(text: str) -> HostRecord:
    fields = text.split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise HostFormatError(text)

    address, host, raw_value, name = fields
    if not _PROTOCOL_VALUE.fullmatch(raw_value):
        raise HostFormatError(text, f"protocol value {raw_value!r} is not a decimal number")
    value = int(raw_value)
    if value > 255:
        raise HostFormatError(text, f"protocol value {value} out of range 0-255")

    return HostRecord(address, host, value, name)
