from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from pcaphost.core.cache import DedupCache
from pcaphost.core.config import Settings
from pcaphost.core.extractor import HostExtractor
from pcaphost.core.models import HostRecord
from pcaphost.core.repository import HostRepository
from pcaphost.core.sources.base import PacketSource
from pcaphost.core.sources.pcap import PcapFileSource
from pcaphost.utils.logger import get_logger

logger = get_logger(__name__)

LIST_HEADER = "address,host,protocolValue,protocolName"


def open_repository(settings: Settings) -> HostRepository:
    return HostRepository(settings.db_path, settings.map_name)


def parse_capture(
    path: str | Path,
    *,
    settings: Optional[Settings] = None,
    include_local: Optional[bool] = None,
    limit: Optional[int] = None,
    progress_cb: Optional[Callable[[int], None]] = None,
) -> int:
    """
    Register every destination host of a capture file.
    Returns the number of hosts that were new to the store.
    """
    source = PcapFileSource(path, limit=limit)
    return parse_source(
        source,
        settings=settings,
        include_local=include_local,
        progress_cb=progress_cb,
    )


def parse_source(
    source: PacketSource,
    *,
    settings: Optional[Settings] = None,
    include_local: Optional[bool] = None,
    progress_cb: Optional[Callable[[int], None]] = None,
    cache: Optional[DedupCache] = None,
) -> int:
    settings = settings or Settings.from_env()
    if include_local is None:
        include_local = settings.include_local
    if cache is None:
        cache = DedupCache(settings.cache_size, settings.cache_ttl)

    extractor = HostExtractor(
        source,
        cache=cache,
        include_local=include_local,
        progress_cb=progress_cb,
    )

    emitted = 0
    inserted = 0
    with open_repository(settings) as repo:
        for record in extractor:
            emitted += 1
            if repo.register(record):
                inserted += 1

    logger.info(
        "Read %d packets, %d candidate hosts, %d new hosts stored",
        extractor.packet_count, emitted, inserted,
    )
    return inserted


def format_host_line(record: HostRecord) -> str:
    # host and protocolValue are joined by '.', not ','
    return f"{record.address},{record.host}.{record.protocol_value},{record.protocol_name}"


def list_host_records(*, settings: Optional[Settings] = None) -> List[HostRecord]:
    settings = settings or Settings.from_env()
    with open_repository(settings) as repo:
        return list(repo.find_all())


def list_hosts(*, settings: Optional[Settings] = None) -> List[str]:
    return [format_host_line(r) for r in list_host_records(settings=settings)]


def count_hosts(*, settings: Optional[Settings] = None) -> int:
    settings = settings or Settings.from_env()
    with open_repository(settings) as repo:
        return repo.count()


def truncate_store(path: str | Path | None = None, *, settings: Optional[Settings] = None) -> bool:
    """
    Delete the store file. Returns False when there was nothing to delete.
    """
    if path is None:
        path = (settings or Settings.from_env()).db_path
    store = Path(path)
    try:
        store.unlink()
    except FileNotFoundError:
        logger.debug("No store at %s, nothing to truncate", store)
        return False
    logger.info("Deleted host store %s", store)
    return True
