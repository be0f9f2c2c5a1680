"""
Minimal change notification for the core collections.

Each collection exposes one Signal per event kind. Callbacks are invoked
synchronously, in registration order, on the thread that emitted.
"""


class Signal:
    """A list of callbacks fired with the same arguments."""

    def __init__(self, name=''):
        self.name = name
        self._callbacks = []

    def connect(self, callback):
        """Register a callback. Registering the same callback twice is a no-op."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)
        return callback

    def disconnect(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self, *args):
        # Copy so a callback can disconnect itself
        for callback in list(self._callbacks):
            callback(*args)

    def __len__(self):
        return len(self._callbacks)

    def __repr__(self):
        return f"Signal({self.name!r}, {len(self._callbacks)} callbacks)"
