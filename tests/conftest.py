"""Shared pytest fixtures for tidc tests."""
from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture()
def tmp_log_file(tmp_path: Path):
    """Return a factory that creates temporary log files."""

    def _make(lines: list[str], name: str = "test.log") -> Path:
        p = tmp_path / name
        p.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def uniformed_log_lines() -> list[str]:
    return [
        '[2021-01-01T00:00:00] [INFO] [src/main.rs:10] ["hello world"] [a=b] ["c d"=1]',
        '[2021/03/04 10:00:01.123 +08:00] [WARN] [<unknown>] [retry] [region_id=42]',
        '[2021/03/04 10:00:02.456 +08:00] [ERROR] [store.rs:88] ["disk full"] [path=/data/tikv] ["free space"="0 B"]',
        '[2021/03/04 10:00:03.789 +08:00] [TRACE] [raft.rs:1024] [tick]',
    ]


@pytest.fixture()
def uniformed_log_json() -> list[str]:
    return [
        '{"message":"hello world","level":"info","source":{"file":"src/main.rs","line":"10"},'
        '"time":"2021-01-01T00:00:00","fields":{"a":"b","c d":"1"}}',
        '{"message":"retry","level":"warn","source":null,'
        '"time":"2021/03/04 10:00:01.123 +08:00","fields":{"region_id":"42"}}',
        '{"message":"disk full","level":"error","source":{"file":"store.rs","line":"88"},'
        '"time":"2021/03/04 10:00:02.456 +08:00","fields":{"path":"/data/tikv","free space":"0 B"}}',
        '{"message":"tick","level":"<unknown>","source":{"file":"raft.rs","line":"1024"},'
        '"time":"2021/03/04 10:00:03.789 +08:00","fields":{}}',
    ]


@pytest.fixture()
def zap_object_lines() -> list[str]:
    return [
        '{a=1,"b c"="d e"}',
        '{region=7, peer=12, "reason"="stale command"}',
        "{}",
    ]
