"""
Location: python/quicksilver_sdk/builders/action.py

Summary:
    Actions run by conditional logic: releasing funds, notifying an
    account, holding execution, or custom server-side actions.

Example:
    from quicksilver_sdk.builders import Action

    Action.release(500).to(freelancer).with_meta({"milestone": 1})
    Action.notify(client_account, "Milestone approved")
"""

from typing import Any, Optional

from ..types import Currency


def _account_ref(account: Any) -> Any:
    """Accounts are referenced by id on the wire."""
    return getattr(account, "id", account)


class Action:
    """
    A single action with a type and its parameters.

    Attributes:
        type: Action type understood by the server ("release", "notify", ...)
    """

    def __init__(self, type: str, data: Optional[dict[str, Any]] = None):
        self.type = type
        self._data = dict(data or {})

    @staticmethod
    def release(amount: float, currency: Currency = "USD") -> "ActionBuilder":
        """Release funds. Chain .to(account) to name the recipient."""
        return ActionBuilder("release", {"amount": amount, "currency": currency})

    @staticmethod
    def notify(account: Any, message: str) -> "Action":
        return Action("notify", {"account": _account_ref(account), "message": message})

    @staticmethod
    def hold(message: str) -> "Action":
        return Action("hold", {"message": message})

    @staticmethod
    def custom(type: str, data: dict[str, Any]) -> "Action":
        return Action(type, data)

    def to_json(self) -> dict[str, Any]:
        """Serialize the action for API transmission."""
        return {"type": self.type, **self._data}

    def __repr__(self) -> str:
        return f"Action({self.to_json()!r})"


class ActionBuilder(Action):
    """Fluent action that can be refined before it is used."""

    def to(self, account: Any) -> "ActionBuilder":
        """Set the target account (an Account or an account id)."""
        self._data["to"] = _account_ref(account)
        return self

    def with_meta(self, meta: dict[str, Any]) -> "ActionBuilder":
        self._data["meta"] = {**self._data.get("meta", {}), **meta}
        return self
