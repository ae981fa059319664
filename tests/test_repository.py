import sqlite3

import pytest

from pcaphost.core.models import HostRecord
from pcaphost.core.repository import HostRepository
from pcaphost.utils.errors import HostFormatError

TCP_HOST = HostRecord("93.184.216.34", "93.184.216.34", 6, "TCP")


def test_register_is_insert_if_absent(tmp_path):
    with HostRepository(tmp_path / "hosts.db") as repo:
        assert repo.register(TCP_HOST) is True
        assert repo.register(HostRecord("93.184.216.34", "other", 17, "UDP")) is False

        assert list(repo.find_all()) == [TCP_HOST]
        assert repo.count() == 1


def test_count_ignores_duplicates(tmp_path):
    records = [HostRecord(f"198.51.100.{i}", f"198.51.100.{i}", 6, "TCP") for i in range(5)]

    with HostRepository(tmp_path / "hosts.db") as repo:
        for r in records:
            repo.register(r)
        for r in records[:3]:
            repo.register(HostRecord(r.address, "dup", 1, "ICMPv4"))

        assert repo.count() == 5
        assert sorted(repo.find_all(), key=lambda r: r.address) == records


def test_records_survive_reopen(tmp_path):
    path = tmp_path / "nested" / "hosts.db"
    with HostRepository(path) as repo:
        repo.register(TCP_HOST)

    assert path.exists()
    with HostRepository(path) as repo:
        assert repo.count() == 1
        assert repo.register(TCP_HOST) is False


def test_map_names_are_separate(tmp_path):
    path = tmp_path / "hosts.db"
    with HostRepository(path, "TcpHost") as repo:
        repo.register(TCP_HOST)
    with HostRepository(path, "Other") as repo:
        assert repo.count() == 0


def test_close_is_idempotent(tmp_path):
    repo = HostRepository(tmp_path / "hosts.db")
    repo.close()
    repo.close()

    with pytest.raises(sqlite3.ProgrammingError):
        repo.count()


def test_context_exit_closes(tmp_path):
    with HostRepository(tmp_path / "hosts.db") as repo:
        pass

    with pytest.raises(sqlite3.ProgrammingError):
        repo.count()


def test_corrupt_value_fails_loudly(tmp_path):
    path = tmp_path / "hosts.db"
    with HostRepository(path) as repo:
        repo.register(TCP_HOST)

    conn = sqlite3.connect(str(path))
    with conn:
        conn.execute('INSERT INTO "TcpHost" (key, value) VALUES (?, ?)', ("1.2.3.4", "1.2.3.4,broken"))
    conn.close()

    with HostRepository(path) as repo:
        with pytest.raises(HostFormatError) as info:
            list(repo.find_all())
        assert info.value.text == "1.2.3.4,broken"


def test_out_of_range_record_never_reaches_the_store(tmp_path):
    with HostRepository(tmp_path / "hosts.db") as repo:
        repo.register(TCP_HOST)
        with pytest.raises(ValueError):
            repo.register(HostRecord("1.1.1.1", "1.1.1.1", 300, "TCP"))

        assert repo.count() == 1
        assert list(repo.find_all()) == [TCP_HOST]
