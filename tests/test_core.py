from __future__ import annotations

import logging

import pytest

from airtable_cms.core import DataStore, LoaderContext, MemoryStore, StoreEntry
from airtable_cms.core.logging import StructuredLogFormatter, bind_tags, configure_logging, get_logger, log_progress


@pytest.fixture
def reset_logging_handlers():
    root = logging.getLogger()
    existing_handlers = list(root.handlers)
    existing_level = root.level
    yield
    root.handlers = existing_handlers
    root.setLevel(existing_level)


class _ListHandler(logging.Handler):
    def __init__(self, formatter: logging.Formatter):
        super().__init__()
        self.records: list[logging.LogRecord] = []
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        self.records.append(record)


def test_memory_store_write_or_replace():
    store = MemoryStore()

    store.set("a", StoreEntry(id="a", data={"v": 1}))
    store.set("b", StoreEntry(id="b", data={"v": 2}))
    store.set("a", StoreEntry(id="a", data={"v": 3}))

    assert len(store) == 2
    assert store.keys() == ["a", "b"]
    assert store.get("a").data == {"v": 3}
    assert "b" in store
    assert store.to_dict() == {"a": {"v": 3}, "b": {"v": 2}}
    assert [entry.id for entry in store] == ["a", "b"]

    store.clear()
    assert len(store) == 0
    assert store.get("a") is None


def test_memory_store_accepts_none_key():
    store = MemoryStore()

    store.set(None, StoreEntry(id=None, data={"Name": "Anon"}))

    assert None in store
    assert store.get(None).data == {"Name": "Anon"}


def test_memory_store_satisfies_protocol():
    assert isinstance(MemoryStore(), DataStore)


def test_loader_context_with_memory_store():
    context = LoaderContext.with_memory_store(collection="guestlog")

    assert isinstance(context.store, MemoryStore)
    assert context.collection == "guestlog"
    assert context.resolve_logger("test.context").logger.name == "test.context"


def test_loader_context_prefers_host_logger():
    host_logger = get_logger("host.pipeline")
    context = LoaderContext(store=MemoryStore(), logger=host_logger)

    assert context.resolve_logger("ignored") is host_logger


def test_structured_formatter_appends_extras():
    formatter = StructuredLogFormatter(use_color=False)
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Fetching Airtable records",
        args=(),
        exc_info=None,
    )
    record.loader = "airtable-loader"
    record.status = "running"
    record.tags = ("airtable-loader",)

    formatted = formatter.format(record)

    assert "Fetching Airtable records" in formatted
    assert formatted.index("loader=airtable-loader") < formatted.index("status=running")
    assert "tags=[airtable-loader]" in formatted


def test_configure_logging_installs_structured_formatter(reset_logging_handlers):
    configure_logging(force=True)

    root = logging.getLogger()
    assert root.handlers, "expected at least one handler configured"
    assert isinstance(root.handlers[0].formatter, StructuredLogFormatter)


def test_configure_logging_reads_level_from_env(monkeypatch, reset_logging_handlers):
    monkeypatch.setenv("AIRTABLE_CMS_LOG_LEVEL", "debug")

    configure_logging(force=True)

    assert logging.getLogger().level == logging.DEBUG


def test_log_progress_populates_record_extras(reset_logging_handlers):
    configure_logging("INFO", force=True)
    logger = bind_tags(get_logger("test.progress", extra={"loader": "airtable-loader"}), ["guestlog"])
    root = logging.getLogger()
    collector = _ListHandler(root.handlers[0].formatter)
    root.addHandler(collector)
    try:
        log_progress(logger, "Airtable records loaded", phase="load", step="store", status="done", extra={"records": 2})
    finally:
        root.removeHandler(collector)

    assert collector.records, "log_progress should emit a record"
    record = collector.records[0]
    assert getattr(record, "loader") == "airtable-loader"
    assert getattr(record, "phase") == "load"
    assert getattr(record, "status") == "done"
    assert getattr(record, "records") == 2
    assert getattr(record, "tags") == ("guestlog",)
    formatted = collector.format(record)
    assert "records=2" in formatted


def test_bind_tags_does_not_mutate_parent():
    parent = get_logger("test.tags", tags=["a"])

    child = bind_tags(parent, ["b", "a"])

    assert parent.extra["tags"] == ("a",)
    assert child.extra["tags"] == ("a", "b")
