from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from unifi_relay.errors import PersistError
from unifi_relay.store import StateEntry, StateStore, coerce_state


def test_read_missing_file_is_empty(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "nope" / "state.json")
    assert store.read() == {}


def test_read_corrupt_file_is_empty(tmp_path: Path) -> None:
    p = tmp_path / "state.json"
    p.write_text("{not json", encoding="utf-8")
    assert StateStore(p).read() == {}


def test_read_non_object_is_empty(tmp_path: Path) -> None:
    p = tmp_path / "state.json"
    p.write_text(json.dumps(["unifi:home"]), encoding="utf-8")
    assert StateStore(p).read() == {}


def test_coerce_state_drops_malformed_entries() -> None:
    raw = {
        "unifi:home": {"hash": "abc", "ts": "t1"},
        "unifi:bad": {"hash": 1, "ts": "t1"},
        "unifi:worse": "abc",
        "": {"hash": "x", "ts": "y"},
    }
    assert coerce_state(raw) == {"unifi:home": StateEntry(hash="abc", ts="t1")}


def test_write_creates_directory_and_pretty_prints(tmp_path: Path) -> None:
    p = tmp_path / "data" / "state.json"
    store = StateStore(p)
    store.write({"unifi:home": StateEntry(hash="abc", ts="t1")})

    text = p.read_text(encoding="utf-8")
    assert json.loads(text) == {"unifi:home": {"hash": "abc", "ts": "t1"}}
    assert "\n  " in text
    assert not (tmp_path / "data" / "state.json.tmp").exists()


def test_write_failure_raises_persist_error(tmp_path: Path) -> None:
    blocker = tmp_path / "data"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = StateStore(blocker / "state.json")
    with pytest.raises(PersistError):
        store.write({"unifi:home": StateEntry(hash="abc", ts="t1")})


def test_swap_if_changed_only_writes_on_new_hash(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json")
    assert store.swap_if_changed("unifi:home", StateEntry(hash="abc", ts="t1")) is True
    assert store.swap_if_changed("unifi:home", StateEntry(hash="abc", ts="t2")) is False
    # The stored ts is the one from the last notified report.
    assert store.read()["unifi:home"] == StateEntry(hash="abc", ts="t1")
    assert store.swap_if_changed("unifi:home", StateEntry(hash="def", ts="t3")) is True
    assert store.read()["unifi:home"] == StateEntry(hash="def", ts="t3")


def test_swap_if_changed_keeps_other_sites(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json")
    store.swap_if_changed("unifi:a", StateEntry(hash="1", ts="t"))
    store.swap_if_changed("unifi:b", StateEntry(hash="2", ts="t"))
    assert set(store.read()) == {"unifi:a", "unifi:b"}


def test_concurrent_swaps_for_different_sites_do_not_lose_updates(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "state.json")
    sites = [f"unifi:site-{i}" for i in range(25)]

    threads = [
        threading.Thread(target=store.swap_if_changed, args=(key, StateEntry(hash="h", ts="t")))
        for key in sites
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert set(store.read()) == set(sites)
