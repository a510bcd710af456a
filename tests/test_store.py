"""Tests for Store."""

import pytest

from kvobind import BindableObject, Store, UndefinedFieldError


class TestStore:
    def test_creation_from_schema(self):
        s = Store({"x": 10, "y": "hello"})
        assert s.get("x") == 10
        assert s.get("y") == "hello"

    def test_initial_overrides(self):
        s = Store({"x": 10, "y": "hello"}, initial={"x": 99})
        assert s.get("x") == 99
        assert s.get("y") == "hello"

    def test_get_nonexistent(self):
        s = Store({"x": 1})
        with pytest.raises(UndefinedFieldError):
            s.get("nope")

    def test_set_nonexistent(self):
        s = Store({"x": 0})
        with pytest.raises(UndefinedFieldError):
            s.set("nope", 99)

    def test_on_change(self):
        s = Store({"x": 0})
        log = []
        s.on_change("x", lambda: log.append(s.get("x")))
        s.set("x", 42)
        s.set("x", 42)
        assert log == [42]

    def test_on_change_order(self):
        s = Store({"x": 0})
        log = []
        s.on_change("x", lambda: log.append("first"))
        s.on_change("x", lambda: log.append("second"))
        s.set("x", 1)
        assert log == ["first", "second"]

    def test_on_change_undefined(self):
        s = Store({"x": 0})
        with pytest.raises(UndefinedFieldError):
            s.on_change("nope", lambda: None)

    def test_disposer_removes_hook(self):
        s = Store({"x": 0})
        log = []
        remove = s.on_change("x", lambda: log.append(s.get("x")))
        s.set("x", 1)
        remove()
        remove()  # second call is a no-op
        s.set("x", 2)
        assert log == [1]

    def test_update(self):
        s = Store({"x": 0, "y": 0})
        log = []
        s.on_change("x", lambda: log.append("x"))
        s.on_change("y", lambda: log.append("y"))
        s.update({"y": 2, "x": 1})
        assert log == ["y", "x"]
        assert (s.get("x"), s.get("y")) == (1, 2)

    def test_bind_store_to_object(self):
        model = BindableObject(count=3)
        s = Store({"count": 0})
        log = []
        s.on_change("count", lambda: log.append(s.get("count")))
        s.bind_to("count", model)
        assert log == [3]
        model.set("count", 4)
        assert log == [3, 4]
        s.unbind("count")
        model.set("count", 5)
        assert s.get("count") == 4

    def test_bind_object_to_store(self):
        s = Store({"count": 1})
        view = BindableObject(shown=0)
        view.bind_to("shown", s, "count")
        s.set("count", 2)
        assert view.get("shown") == 2
        assert s.is_bound("count")

    def test_reconcile_adds_keys(self):
        s = Store({"x": 1})
        s.reconcile({"x": 1, "z": 99}, lambda store: [])
        assert s.get("z") == 99
        assert s.get("x") == 1  # preserved

    def test_reconcile_preserves_values(self):
        s = Store({"x": 1})
        s.set("x", 42)
        s.reconcile({"x": 1}, lambda store: [])
        assert s.get("x") == 42

    def test_reconcile_preserves_bindings(self):
        model = BindableObject(x=5)
        s = Store({"x": 1})
        s.bind_to("x", model)
        s.reconcile({"x": 1, "y": 2}, lambda store: [])
        model.set("x", 6)
        assert s.get("x") == 6

    def test_reconcile_disposes_old_hooks(self):
        s = Store({"x": 0})
        log = []

        def setup(store):
            return [store.on_change("x", lambda: log.append(store.get("x")))]

        s.reconcile({"x": 0}, setup)
        s.set("x", 1)
        assert log == [1]

        # Reconcile again — old hook should be disposed
        log2 = []

        def setup2(store):
            return [store.on_change("x", lambda: log2.append(store.get("x")))]

        s.reconcile({"x": 0}, setup2)
        s.set("x", 2)
        assert log2 == [2]
        assert log == [1]  # old hook didn't fire

    def test_dispose(self):
        model = BindableObject(x=0)
        s = Store({"x": 0})
        log = []

        def setup(store):
            return [store.on_change("x", lambda: log.append(store.get("x")))]

        s.reconcile({"x": 0}, setup)
        s.bind_to("x", model)
        model.set("x", 1)
        assert log == [1]

        s.dispose()
        model.set("x", 2)
        assert log == [1]  # hooks disposed
        assert s.get("x") == 1  # and unbound
        assert not model.is_bound("x")

    def test_repr(self):
        assert repr(Store({"x": 1})) == "Store(x=1)"

    def test_reconcile_tracks_hooks_without_return_value(self):
        s = Store({"x": 0})
        log = []

        def setup(store):
            store.on_change("x", lambda: log.append("old"))

        s.reconcile({"x": 0}, setup)
        s.reconcile({"x": 0}, lambda store: None)
        s.set("x", 1)
        assert log == []

    def test_reconcile_failure_removes_partial_hooks(self):
        s = Store({"x": 0})
        log = []

        def half_setup(store):
            store.on_change("x", lambda: log.append("stale"))
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            s.reconcile({"x": 0}, half_setup)
        s.set("x", 1)
        assert log == []
