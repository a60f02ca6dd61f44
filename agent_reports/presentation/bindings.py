"""
agent_reports/presentation/bindings.py

Declarative wiring from named UI actions to state-machine handlers.

A UI only calls ``dispatch(name)``; which handler runs, which stage it
occupies, and whether it is currently allowed are declared once here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from agent_reports.errors import InputValidationError

logger = logging.getLogger(__name__)


class ActionInFlightError(InputValidationError):
    """Raised when an action is dispatched while its stage is still running."""


@dataclass(frozen=True)
class ActionBinding:
    name: str
    stage: str
    handler: Callable[..., Any]
    enabled_when: Callable[[], bool] | None = None


class ActionRegistry:
    """
    Named actions, serialized per stage.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, ActionBinding] = {}
        self._running: set[str] = set()

    def bind(
        self,
        name: str,
        *,
        stage: str,
        handler: Callable[..., Any],
        enabled_when: Callable[[], bool] | None = None,
    ) -> None:
        if name in self._bindings:
            raise ValueError(f"Action '{name}' is already bound.")
        self._bindings[name] = ActionBinding(name=name, stage=stage, handler=handler, enabled_when=enabled_when)

    def names(self) -> list[str]:
        return list(self._bindings)

    def is_running(self, stage: str) -> bool:
        return stage in self._running

    def is_enabled(self, name: str) -> bool:
        binding = self._bindings[name]
        if binding.stage in self._running:
            return False
        return binding.enabled_when() if binding.enabled_when is not None else True

    def dispatch(self, name: str, **kwargs: Any) -> Any:
        """
        Run the handler bound to ``name``.

        Raises KeyError for unknown actions and ActionInFlightError while
        another action of the same stage is running.
        """

        binding = self._bindings[name]
        if binding.stage in self._running:
            logger.warning("Rejected action=%s stage=%s already running", name, binding.stage)
            raise ActionInFlightError(f"'{name}' is already running.")

        self._running.add(binding.stage)
        try:
            return binding.handler(**kwargs)
        finally:
            self._running.discard(binding.stage)
