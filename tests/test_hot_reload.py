"""Tests for HotReloadStore — safe reconciliation."""

import logging

from kvobind import BindableObject
from kvobind.hot_reload import HotReloadStore


class TestHotReloadStore:
    def test_creation(self):
        s = HotReloadStore({"a": 1, "b": "x"})
        assert s.get("a") == 1
        assert s.get("b") == "x"

    def test_safe_reconcile_success(self):
        s = HotReloadStore({"a": 1})
        log = []

        def setup(store):
            store.on_change("a", lambda: log.append(store.get("a")))

        s.reconcile({"a": 1, "b": 2}, setup)
        assert s.get("b") == 2
        s.set("a", 10)
        assert log == [10]

    def test_safe_reconcile_failure(self, caplog):
        """When setup_fn raises, store continues with values intact, no hooks."""
        s = HotReloadStore({"a": 1})
        s.set("a", 42)

        def bad_setup(store):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="kvobind.hot_reload"):
            s.reconcile({"a": 1, "c": 3}, bad_setup)

        assert s.get("a") == 42  # value preserved
        assert s.get("c") == 3  # new key added
        assert s._hook_disposers == []  # degraded mode
        assert "Hook setup failed" in caplog.text

    def test_failure_removes_hooks_registered_before_error(self):
        s = HotReloadStore({"a": 1})
        log = []

        def half_setup(store):
            store.on_change("a", lambda: log.append("stale"))
            raise RuntimeError("boom")

        s.reconcile({"a": 1}, half_setup)
        s.set("a", 2)
        s.reconcile({"a": 1}, lambda store: None)
        s.set("a", 3)
        assert log == []

    def test_failure_keeps_bindings(self, caplog):
        model = BindableObject(a=1)
        s = HotReloadStore({"a": 0})
        s.bind_to("a", model)

        def bad_setup(store):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="kvobind.hot_reload"):
            s.reconcile({"a": 0}, bad_setup)
        model.set("a", 2)
        assert s.get("a") == 2
        assert "1 bound fields kept" in caplog.text

    def test_reconcile_logs_info(self, caplog):
        s = HotReloadStore({"a": 1})

        with caplog.at_level(logging.INFO, logger="kvobind.hot_reload"):
            s.reconcile({"a": 1, "b": 2}, lambda store: [store.on_change("a", lambda: None)])

        assert "Reconciled HotReloadStore" in caplog.text
        assert "new keys ['b']" in caplog.text
        assert "hooks 0->1" in caplog.text

    def test_is_a_store(self):
        """HotReloadStore is a proper subclass of Store."""
        from kvobind import Store
        s = HotReloadStore({"x": 0})
        assert isinstance(s, Store)
