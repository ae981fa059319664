from pathlib import Path
from typing import Iterable, List

import pytest
from scapy.all import wrpcap  # type: ignore
from scapy.layers.inet import ICMP, IP, TCP, UDP  # type: ignore
from scapy.layers.l2 import ARP, Ether  # type: ignore
from scapy.layers.inet6 import IPv6  # type: ignore

from pcaphost.core.config import Settings
from pcaphost.core.sources.base import PacketSource

SRC_MAC = "00:11:22:33:44:55"
DST_MAC = "66:77:88:99:aa:bb"
SRC_IP = "192.168.1.10"

L4 = {"tcp": TCP, "udp": UDP, "icmp": ICMP}


def frame(dst: str, proto: str = "tcp", src: str = SRC_IP):
    """Ethernet/IPv4 frame with fixed MACs so scapy never resolves anything."""
    return Ether(src=SRC_MAC, dst=DST_MAC) / IP(src=src, dst=dst) / L4[proto]()


def ipv6_frame(dst: str = "2001:db8::1"):
    return Ether(src=SRC_MAC, dst=DST_MAC) / IPv6(src="2001:db8::2", dst=dst) / TCP()


def arp_frame():
    return Ether(src=SRC_MAC, dst=DST_MAC) / ARP(psrc=SRC_IP, pdst="192.168.1.1", hwsrc=SRC_MAC)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ListSource(PacketSource):
    """In-memory packets; an optional clock is set before each packet."""

    def __init__(self, packets: Iterable, *, clock: FakeClock = None, times: List[float] = None):
        self._packets = list(packets)
        self._clock = clock
        self._times = times

    def packets(self):
        for i, pkt in enumerate(self._packets):
            if self._clock is not None and self._times is not None:
                self._clock.now = self._times[i]
            yield pkt


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=tmp_path / "store" / "hosts.db")


@pytest.fixture
def write_capture(tmp_path: Path):
    def _write(packets, name: str = "capture.pcap") -> Path:
        path = tmp_path / name
        wrpcap(str(path), list(packets))
        return path
    return _write


@pytest.fixture
def example_capture(write_capture) -> Path:
    return write_capture([
        frame("10.0.0.5"),
        frame("93.184.216.34"),
        frame("93.184.216.34"),
    ])
