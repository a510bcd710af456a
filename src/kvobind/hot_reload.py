"""Hot-reload-aware store. Opt-in — import only if you need hot-reload support.

A reloaded module calls reconcile() again with its new schema and hook
setup. Values and bindings survive the reload; only hooks are replaced.
"""

import logging

from kvobind.store import Store

logger = logging.getLogger("kvobind.hot_reload")


class HotReloadStore(Store):
    """Store whose reconcile() never raises out of a broken setup function.

    When setup_fn fails, every hook it managed to register is removed again
    and the store keeps serving values and bindings with no hooks at all.
    """

    def reconcile(self, schema, setup_fn):
        new_keys = self._add_keys(schema)
        old_count = len(self._hook_disposers)
        self._dispose_hooks()

        try:
            self._hook_disposers = self._register_hooks(setup_fn)
        except Exception:
            logger.exception(
                "Hook setup failed; %s now runs without hooks (%d bound fields kept)",
                type(self).__name__, self._bound_count(),
            )
            return

        logger.info(
            "Reconciled %s: new keys %s, hooks %d->%d, %d bound fields kept",
            type(self).__name__, new_keys or "none", old_count,
            len(self._hook_disposers), self._bound_count(),
        )

    def _bound_count(self) -> int:
        return sum(1 for key in self._slots if self.is_bound(key))
