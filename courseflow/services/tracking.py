from __future__ import annotations

import functools
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from courseflow.core.errors import DomainError
from courseflow.core.metrics import WORKFLOW_ACTIONS

P = ParamSpec("P")
R = TypeVar("R")


def tracked(entity: str, action: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Count each call of a façade operation by its outcome.

    The outcome label is ``ok`` or the raised DomainError's ``code``.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                result = fn(*args, **kwargs)
            except DomainError as exc:
                WORKFLOW_ACTIONS.labels(
                    entity=entity, action=action, outcome=exc.code
                ).inc()
                raise
            WORKFLOW_ACTIONS.labels(entity=entity, action=action, outcome="ok").inc()
            return result

        return wrapper

    return decorator
