"""
Location: python/quicksilver_sdk/builders/product.py

Summary:
    ProductBuilder: fluent definition of a programmable product, its
    pricing, guarantees and multi-agent workflow.

Example:
    translation = (
        client.product("translation-service")
        .charge(0.01, "per_word")
        .guarantee({"accuracy": 0.98})
        .stage("translate", delegate_to=translator.id, charge=0.008)
    )
    await buyer.purchase(translation, {"words": 1200})
"""

from typing import Any, Literal

from ..types import Currency, ProductDefinition, ProductPricing, WorkflowStage


class ProductBuilder:
    """
    Builder for a ProductDefinition. Every setter returns the builder.

    Attributes:
        id: Product identifier
    """

    def __init__(self, id: str):
        self.id = id
        self._definition = ProductDefinition(id=id)

    def charge(self, rate: float, unit: str, currency: Currency = "USD") -> "ProductBuilder":
        """Use unit-based pricing, e.g. charge(0.01, "per_word")."""
        self._definition.pricing = ProductPricing(
            model="per_unit", rate=rate, unit=unit, currency=currency
        )
        return self

    def stream(
        self,
        rate: float,
        unit: Literal["per_second", "per_minute"],
        currency: Currency = "USD",
    ) -> "ProductBuilder":
        """Use streaming pricing, paid out continuously at `rate` per `unit`."""
        self._definition.pricing = ProductPricing(
            model="streaming", rate=rate, unit=unit, currency=currency
        )
        return self

    def guarantee(self, guarantees: dict[str, Any]) -> "ProductBuilder":
        """Merge service level guarantees into the product."""
        self._definition.guarantees = {**self._definition.guarantees, **guarantees}
        return self

    def stage(self, name: str, *, delegate_to: str, charge: float) -> "ProductBuilder":
        """Append a workflow stage delegated to another agent account."""
        self._definition.workflow.append(
            WorkflowStage(name=name, delegate_to=delegate_to, charge=charge)
        )
        return self

    def get_pricing(self) -> ProductPricing:
        return self._definition.pricing

    def get_guarantees(self) -> dict[str, Any]:
        return self._definition.guarantees

    def get_workflow(self) -> list[WorkflowStage]:
        return self._definition.workflow

    @property
    def structure(self) -> ProductDefinition:
        return self._definition

    def to_json(self) -> dict[str, Any]:
        return self._definition.model_dump(by_alias=True)


Product = ProductBuilder
