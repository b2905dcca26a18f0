"""Lifecycle notifications for config instances."""

from typing import Any, Callable, Dict, Iterator, List

Handler = Callable[[Any], None]

EVENT_NAMES = ("reading", "creating", "loaded", "before_save", "after_save")


class EventHook:
    """An ordered list of handlers called synchronously with the sender."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> Handler:
        """Register a handler. Returns it so this can be used as a decorator."""
        if not callable(handler):
            raise TypeError(f"Handler for '{self.name}' must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Handler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            raise ValueError(f"Handler {handler!r} is not subscribed to '{self.name}'") from None

    def fire(self, sender: Any) -> None:
        """Call every handler in registration order.

        Handler exceptions propagate and stop the remaining handlers.
        """
        # Copy so a handler may unsubscribe itself
        for handler in list(self._handlers):
            handler(sender)

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: object) -> bool:
        return handler in self._handlers

    def __iter__(self) -> Iterator[Handler]:
        return iter(list(self._handlers))

    def __repr__(self) -> str:
        return f"EventHook({self.name!r}, handlers={len(self._handlers)})"


class ConfigEvents:
    """The five lifecycle hooks owned by a single config instance."""

    reading: EventHook
    creating: EventHook
    loaded: EventHook
    before_save: EventHook
    after_save: EventHook

    def __init__(self):
        self._hooks: Dict[str, EventHook] = {}
        for name in EVENT_NAMES:
            hook = EventHook(name)
            self._hooks[name] = hook
            setattr(self, name, hook)

    def get(self, name: str) -> EventHook:
        """Return the hook called ``name``.

        Raises:
            ValueError: If ``name`` is not one of ``EVENT_NAMES``.
        """
        try:
            return self._hooks[name]
        except KeyError:
            raise ValueError(f"Unknown event '{name}', expected one of: {', '.join(EVENT_NAMES)}") from None

    def __iter__(self) -> Iterator[EventHook]:
        return iter(self._hooks.values())
