import collections

import attr

from .internal.logger import get_logger


log = get_logger(__name__)


@attr.s(slots=True)
class Hooks(object):
    """
    Registry of listener functions keyed by hook name.

    Native connections expose one of these as ``hooks`` and emit
    :data:`instrumented_db.ext.sql.STATE_CHANGE` on it; connection proxies
    expose their own and re-emit every event they receive.

    Example::

        @connection.hooks.on(STATE_CHANGE)
        def on_state_change(sender, event):
            print(event.original_state, "->", event.current_state)
    """

    _hooks = attr.ib(init=False, factory=lambda: collections.defaultdict(list))

    def register(self, hook, func=None):
        """
        Register ``func`` for the hook named ``hook``.

        If no function is provided then a decorator is returned::

            @connection.hooks.register(STATE_CHANGE)
            def on_state_change(sender, event):
                pass

        Registering the same function twice for one hook is a no-op.
        """
        if not func:

            def wrapper(func):
                self.register(hook, func)
                return func

            return wrapper

        listeners = self._hooks[hook]
        if func not in listeners:
            listeners.append(func)

    on = register

    def deregister(self, hook, func):
        """Remove ``func`` from ``hook``; unknown hooks and functions are ignored."""
        listeners = self._hooks.get(hook)
        if listeners and func in listeners:
            listeners.remove(func)

    def registered(self, hook):
        """Return the listeners registered for ``hook``, in registration order."""
        return tuple(self._hooks.get(hook, ()))

    def emit(self, hook, *args, **kwargs):
        """
        Call every function registered for ``hook`` with the given arguments.

        A listener raising stops the emission: the error is logged and
        propagates to the caller, and later listeners are not called.
        """
        for func in tuple(self._hooks.get(hook, ())):
            try:
                func(*args, **kwargs)
            except Exception:
                log.error("Failed to run hook %s function %s", hook, func, exc_info=True)
                raise
