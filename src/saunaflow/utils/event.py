from saunaflow.utils import setup_logger

logger = setup_logger(__name__)


class Event:
    """
    A list of listeners fired together with the same arguments.

    Listeners run in registration order on the emitting thread. A listener that
    raises is logged and the remaining listeners still run.
    """

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners = []

    def add_listener(self, listener):
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self):
        self._listeners.clear()

    def __len__(self):
        return len(self._listeners)

    def emit(self, *args, **kwargs):
        for listener in list(self._listeners):
            try:
                listener(*args, **kwargs)
            except Exception:
                logger.exception(f"Error in '{self.name}' listener {getattr(listener, '__name__', listener)!r}")
