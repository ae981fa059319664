from __future__ import annotations

import ipaddress
from typing import Callable, Iterator, Optional

from scapy.layers.inet import IP  # type: ignore

from pcaphost.core.cache import DedupCache
from pcaphost.core.models import HostRecord, protocol_name
from pcaphost.core.sources.base import PacketSource
from pcaphost.utils.errors import (
    CaptureError,
    CaptureOpenError,
    ExtractionStateError,
)
from pcaphost.utils.logger import get_logger

logger = get_logger(__name__)

# RFC1918 site-local ranges
SITE_LOCAL_NETWORKS = (
    ipaddress.IPv4Network("10.0.0.0/8"),
    ipaddress.IPv4Network("172.16.0.0/12"),
    ipaddress.IPv4Network("192.168.0.0/16"),
)


def is_site_local(address: str) -> bool:
    ip = ipaddress.IPv4Address(address)
    return any(ip in net for net in SITE_LOCAL_NETWORKS)


def ipv4_payload(packet) -> Optional[IP]:
    """
    The IPv4 header carried directly by the frame, or the frame itself for
    raw-IP captures. Tunnelled or quoted IP headers are not considered.
    """
    if isinstance(packet, IP):
        return packet
    payload = getattr(packet, "payload", None)
    if isinstance(payload, IP):
        return payload
    return None


def _unresolved(address: str) -> str:
    return address


class HostExtractor:
    """
    Turns a packet source into a lazy stream of destination HostRecords.

    CAUTION: single consumer, single pass. Not thread-safe.
    """

    def __init__(
        self,
        source: PacketSource,
        *,
        cache: Optional[DedupCache] = None,
        include_local: bool = False,
        resolver: Optional[Callable[[str], str]] = None,
        progress_cb: Optional[Callable[[int], None]] = None,
        progress_interval: int = 1000,
    ):
        self.source = source
        self.cache = cache if cache is not None else DedupCache()
        self.include_local = include_local
        self.resolver = resolver or _unresolved
        self.progress_cb = progress_cb
        self.progress_interval = progress_interval
        self.packet_count = 0
        self._started = False

    def __iter__(self) -> Iterator[HostRecord]:
        return self.records()

    def records(self) -> Iterator[HostRecord]:
        if self._started:
            raise ExtractionStateError("host extraction is single-pass and was already started")
        self._started = True
        return self._generate()

    def cursor(self) -> "HostCursor":
        return HostCursor(self.records())

    def _generate(self) -> Iterator[HostRecord]:
        packets = iter(self.source.packets())

        while True:
            try:
                pkt = next(packets)
            except StopIteration:
                break
            except CaptureOpenError as e:
                logger.error("Cannot read capture: %s", e.message)
                break
            except (CaptureError, TimeoutError) as e:
                logger.error("Capture stream ended early: %s", e)
                break
            except EOFError:
                break

            self.packet_count += 1
            if self.progress_cb and self.packet_count % self.progress_interval == 0:
                self.progress_cb(self.packet_count)

            record = self._candidate(pkt)
            if record is None:
                continue

            self.cache.put(record.address, record.host)
            logger.debug("parsing: %s", record)
            yield record

        if self.progress_cb:
            self.progress_cb(self.packet_count)

    def _candidate(self, pkt) -> Optional[HostRecord]:
        ip = ipv4_payload(pkt)
        if ip is None:
            return None

        dst = ip.dst
        if self.cache.get(dst) is not None:
            return None
        if not self.include_local and is_site_local(dst):
            return None

        proto = int(ip.proto)
        return HostRecord(
            address=dst,
            host=self.resolver(dst),
            protocol_value=proto,
            protocol_name=protocol_name(proto),
        )


class HostCursor:
    """
    Probe/take access to a host stream.

    Precondition of take(): the immediately preceding has_next() returned
    True. Repeated has_next() calls without take() keep the same record.
    """

    def __init__(self, records: Iterator[HostRecord]):
        self._records = records
        self._pending: Optional[HostRecord] = None

    def has_next(self) -> bool:
        if self._pending is None:
            self._pending = next(self._records, None)
        return self._pending is not None

    def take(self) -> HostRecord:
        if self._pending is None:
            raise ExtractionStateError("take() called without a successful has_next()")
        record, self._pending = self._pending, None
        return record
