from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Optional

from scapy.all import PcapReader  # type: ignore
from scapy.error import Scapy_Exception  # type: ignore

from pcaphost.core.sources.base import PacketSource
from pcaphost.utils.errors import CaptureOpenError, CaptureReadError


class PcapFileSource(PacketSource):
    """
    Streams frames from a .pcap/.pcapng file without loading it into memory.
    The file is only opened once iteration starts.
    """

    def __init__(self, path: str | Path, *, limit: Optional[int] = None):
        self.path = Path(path)
        self.limit = limit

    def _open(self) -> PcapReader:
        if not self.path.is_file():
            raise CaptureOpenError(self.path, "no such file")
        try:
            return PcapReader(str(self.path))
        except (OSError, Scapy_Exception) as e:
            raise CaptureOpenError(self.path, str(e) or type(e).__name__) from e

    def packets(self) -> Iterable[object]:
        reader = self._open()
        count = 0
        with reader:
            while True:
                try:
                    pkt = next(reader)
                except (StopIteration, EOFError):
                    # EOFError: record header cut short at the end of the file
                    break
                except (OSError, Scapy_Exception) as e:
                    raise CaptureReadError(self.path, str(e) or type(e).__name__) from e

                yield pkt
                count += 1
                if self.limit and count >= self.limit:
                    break


def iter_packets_from_pcap(pcap_path: str | Path, limit: Optional[int] = None) -> Iterator[object]:
    """
    Stream packets from a PCAP file.
    """
    yield from PcapFileSource(pcap_path, limit=limit).packets()
