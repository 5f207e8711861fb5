import logging
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def best_effort(step: str, fn: Callable[..., T], *args: Any, fallback: Optional[T] = None, **kwargs: Any) -> Optional[T]:
    """Run a side effect whose failure must not affect the enclosing operation.

    The error is logged as a warning and ``fallback`` is returned instead.
    """
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        logger.warning(f"Best-effort step '{step}' failed: {e}")
        return fallback
