"""
Location: python/quicksilver_sdk/builders/condition.py

Summary:
    ConditionBuilder: fluent "when ... then ... otherwise" rules attached
    to transactions and products.

Example:
    from quicksilver_sdk import Action, ConditionBuilder, Event

    escrow_rules = (
        ConditionBuilder()
        .when(Event.MILESTONE_APPROVED)
        .then(Action.release(500).to(freelancer))
        .otherwise(Action.hold("Awaiting approval"))
    )
"""

from enum import Enum
from typing import Any, Callable, Optional, Union

from .action import Action
from ..types import Event

Predicate = Callable[[Any], bool]
Trigger = Union[Event, str, Predicate]


class Condition:
    """
    One trigger with the actions it fires.

    Attributes:
        trigger: An Event, an event name, or a predicate over a context
        predicate: Optional refining predicate
        actions: Actions to run when the condition holds
    """

    def __init__(self, trigger: Trigger, predicate: Optional[Predicate] = None):
        self.trigger = trigger
        self.predicate = predicate
        self.actions: list[Action] = []

    def to_json(self) -> dict[str, Any]:
        # Local callables cannot be shipped; the server sees placeholders
        if callable(self.trigger):
            trigger = "custom_function"
        elif isinstance(self.trigger, Enum):
            trigger = self.trigger.value
        else:
            trigger = self.trigger

        data: dict[str, Any] = {
            "trigger": trigger,
            "actions": [action.to_json() for action in self.actions],
        }
        if self.predicate is not None:
            data["predicate"] = "custom_predicate"
        return data


class ConditionBuilder:
    """Accumulates conditions and fallback actions."""

    def __init__(self):
        self._conditions: list[Condition] = []
        self._otherwise: list[Action] = []

    def when(self, trigger: Trigger, predicate: Optional[Predicate] = None) -> "ConditionBuilder":
        """
        Start a new condition.

        Args:
            trigger: An Event, an event name, or a predicate function
            predicate: Optional refining predicate

        Returns:
            This builder, for chaining
        """
        self._conditions.append(Condition(trigger, predicate))
        return self

    def then(self, *actions: Action) -> "ConditionBuilder":
        """
        Add actions to the most recent condition.

        Raises:
            ValueError: If no condition was started with when()
        """
        if not self._conditions:
            raise ValueError("You must call '.when()' before '.then()'.")
        self._conditions[-1].actions.extend(actions)
        return self

    def otherwise(self, *actions: Action) -> "ConditionBuilder":
        """Add fallback actions for when no condition holds."""
        self._otherwise.extend(actions)
        return self

    def get_conditions(self) -> list[Condition]:
        return self._conditions

    def get_otherwise_actions(self) -> list[Action]:
        return self._otherwise

    def to_json(self) -> dict[str, Any]:
        """Compile the rules into the structure the API expects."""
        return {
            "conditions": [condition.to_json() for condition in self._conditions],
            "otherwise": [action.to_json() for action in self._otherwise],
        }
