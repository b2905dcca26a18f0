"""Result values for the non-throwing config operations."""

import logging
from typing import Any, Callable, NamedTuple, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    """Result of an operation that reports failure instead of raising.

    Unpacks as ``(success, value, error)`` and is truthy only on success.
    """

    success: bool
    value: Any = None
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.success


def attempt(
    func: Callable[..., Any],
    *args: Any,
    reraise: Tuple[Type[BaseException], ...] = (),
    **kwargs: Any,
) -> Outcome:
    """Call ``func`` and convert any exception into a failed ``Outcome``.

    Args:
        func: The throwing operation to run
        reraise: Exception classes that must still propagate to the caller

    Returns:
        ``Outcome(True, result, None)`` or ``Outcome(False, None, error)``
    """
    try:
        result = func(*args, **kwargs)
    except reraise:
        raise
    except Exception as e:
        name = getattr(func, "__qualname__", repr(func))
        logger.warning(f"{name} failed: {type(e).__name__}: {e}")
        return Outcome(False, None, e)
    return Outcome(True, result, None)
