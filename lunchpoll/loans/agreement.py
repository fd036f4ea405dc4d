"""A single loan between a lender and a borrower.

Tracks repayments against principal plus flat interest and reports
the outcome to the factory that created it, which adjusts the
borrower's trust score.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lunchpoll.errors import LoanError, LoanRejection
from lunchpoll.schemas.loan import LoanStatus, LoanTerms

if TYPE_CHECKING:
    from lunchpoll.loans.factory import LoanFactory

logger = logging.getLogger(__name__)

# Trust score adjustments reported back to the factory
REPAID_TRUST_DELTA = 10
DEFAULT_TRUST_DELTA = -20


class LoanAgreement:
    """Status-tracking ledger for one loan.

    Created only by LoanFactory.create_loan; the factory reference is
    what lets this agreement update the borrower's trust score.
    """

    def __init__(self, loan_id: int, terms: LoanTerms, factory: LoanFactory) -> None:
        self.loan_id = loan_id
        self.terms = terms
        self._factory = factory
        self._repaid = 0
        self._defaulted = False

    @property
    def repaid(self) -> int:
        return self._repaid

    @property
    def outstanding(self) -> int:
        return max(self.terms.total_due - self._repaid, 0)

    @property
    def status(self) -> LoanStatus:
        if self._defaulted:
            return LoanStatus.DEFAULTED
        if self._repaid >= self.terms.total_due:
            return LoanStatus.REPAID
        return LoanStatus.ACTIVE

    def _require_active(self) -> None:
        if self.status is not LoanStatus.ACTIVE:
            raise LoanError(
                LoanRejection.NOT_ACTIVE,
                f"Loan {self.loan_id} is {self.status.value}",
            )

    def repay(self, caller: str, amount: int) -> LoanStatus:
        """Apply a repayment from the borrower and return the new status."""
        if caller != self.terms.borrower:
            raise LoanError(LoanRejection.NOT_BORROWER, f"{caller!r} is not the borrower")
        self._require_active()
        if amount <= 0:
            raise LoanError(LoanRejection.INVALID_TERMS, "Repayment must be positive")

        self._repaid += amount
        logger.debug(
            "Loan %d: repaid %d of %d", self.loan_id, self._repaid, self.terms.total_due,
        )
        if self.status is LoanStatus.REPAID:
            logger.info("Loan %d fully repaid by %s", self.loan_id, self.terms.borrower)
            self._factory.update_trust_score(self, self.terms.borrower, REPAID_TRUST_DELTA)
        return self.status

    def mark_default(self, caller: str) -> None:
        """Mark the loan defaulted. Lender only, and only once it is overdue.

        Overdue is judged by the factory clock, never by a time the
        caller supplies.
        """
        if caller != self.terms.lender:
            raise LoanError(LoanRejection.NOT_LENDER, f"{caller!r} is not the lender")
        self._require_active()
        if self._factory.now() <= self.terms.due_at:
            raise LoanError(
                LoanRejection.NOT_DUE,
                f"Loan {self.loan_id} is not due until {self.terms.due_at:.0f}",
            )

        self._defaulted = True
        logger.info("Loan %d defaulted by %s", self.loan_id, self.terms.borrower)
        self._factory.update_trust_score(self, self.terms.borrower, DEFAULT_TRUST_DELTA)
