"""
Fluent builders for conditional logic, actions and programmable products.

Available builders:
    - ConditionBuilder: when/then/otherwise rules
    - Action, ActionBuilder: actions fired by conditions
    - ProductBuilder: programmable product definitions
"""

from .action import Action, ActionBuilder
from .condition import Condition, ConditionBuilder
from .product import Product, ProductBuilder

__all__ = [
    "Action",
    "ActionBuilder",
    "Condition",
    "ConditionBuilder",
    "Product",
    "ProductBuilder",
]
