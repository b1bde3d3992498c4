"""Verbose DEBUG call logging for the layout engine."""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_MAX_ITEMS = 5
_MAX_LENGTH = 400

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxlist = _MAX_ITEMS
_repr.maxtuple = _MAX_ITEMS
_repr.maxdict = _MAX_ITEMS
_repr.maxset = _MAX_ITEMS


def _describe(value: Any) -> str:
    """Bounded rendering of an argument or result; arrays are summarized."""

    if isinstance(value, np.ndarray):
        summary = f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
        if 0 < value.size <= _MAX_ITEMS:
            return f"{summary} values={value.tolist()}"
        if value.size and np.issubdtype(value.dtype, np.number):
            return f"{summary} min={float(value.min()):.6g} max={float(value.max()):.6g}"
        return summary
    rendered = _repr.repr(value)
    if len(rendered) > _MAX_LENGTH:
        return rendered[:_MAX_LENGTH] + "... (truncated)"
    return rendered


def _format_call(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_describe(arg) for arg in args]
    parts += [f"{key}={_describe(value)}" for key, value in kwargs.items()]
    return ", ".join(parts)


def debug_log_call(logger: logging.Logger, *, name: Optional[str] = None) -> Callable[[F], F]:
    """Return a decorator that emits Entering/Exiting DEBUG records around calls."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func
        qualname = name or func.__qualname__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s(%s)", qualname, _format_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.debug("Exception in %s", qualname, exc_info=True)
                raise
            logger.debug("Exiting %s -> %s", qualname, _describe(result))
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Iterable[str] = (),
) -> None:
    """Wrap every function defined in the module ``namespace``."""

    module_name = namespace["__name__"]
    logger = logger or logging.getLogger(module_name)
    skipped = set(skip)
    for name, value in list(namespace.items()):
        if name in skipped or not inspect.isfunction(value):
            continue
        if value.__module__ == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)


__all__ = ["apply_debug_logging", "debug_log_call"]
