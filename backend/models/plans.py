"""
Pydantic models for the plan catalog
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlanCatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    amount: float
    currency: str
    interval: str
    # Stripe price for this interval; never sent to clients
    price_id: Optional[str] = Field(default=None, exclude=True)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError('Amount cannot be negative')
        return v

    @property
    def display_amount(self) -> str:
        """Amount immediately followed by the currency, e.g. ``10USD``"""
        amount = int(self.amount) if float(self.amount).is_integer() else self.amount
        return f"{amount}{self.currency}"

    @property
    def option_label(self) -> str:
        """Label used in the plan selector"""
        amount = int(self.amount) if float(self.amount).is_integer() else self.amount
        return f"{self.name} - ${amount} / {self.interval}"


class PlanListResponse(BaseModel):
    plans: list[PlanCatalogEntry]
