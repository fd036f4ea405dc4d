"""Loan agreement schemas.

Defines the loan status values and the immutable LoanTerms captured
when a factory creates an agreement.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class LoanStatus(StrEnum):
    """Lifecycle of a loan agreement. Repaid and Defaulted are terminal."""

    ACTIVE = "active"
    REPAID = "repaid"
    DEFAULTED = "defaulted"


class LoanTerms(BaseModel):
    """Terms fixed at creation time."""

    model_config = ConfigDict(frozen=True)

    lender: str = Field(description="Principal id of the lender")
    borrower: str = Field(description="Principal id of the borrower")
    amount: int = Field(gt=0, description="Principal in the token's smallest unit")
    token: str = Field(min_length=1, description="Token or currency symbol")
    duration: float = Field(gt=0, description="Seconds from start until the loan is due")
    interest_rate: int = Field(ge=0, description="Flat interest in whole percent")
    start: float = Field(description="Logical time the agreement was created")

    @property
    def total_due(self) -> int:
        return self.amount + self.amount * self.interest_rate // 100

    @property
    def due_at(self) -> float:
        return self.start + self.duration
