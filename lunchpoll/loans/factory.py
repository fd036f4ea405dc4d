"""Loan factory and borrower trust scores.

The factory creates agreements and accepts trust score updates only
from agreements it created itself. The check is on the identity of the
calling agreement object, never on a name or id it presents.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from lunchpoll.errors import LoanError, LoanRejection
from lunchpoll.loans.agreement import LoanAgreement
from lunchpoll.schemas.loan import LoanTerms
from lunchpoll.voting.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class LoanFactory:
    """Creates loan agreements and keeps borrower trust scores."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._agreements: list[LoanAgreement] = []
        self._trust_scores: dict[str, int] = {}

    @property
    def agreements(self) -> list[LoanAgreement]:
        return list(self._agreements)

    def now(self) -> float:
        return self._clock.now()

    def trust_score(self, borrower: str) -> int:
        return self._trust_scores.get(borrower, 0)

    def create_loan(
        self,
        lender: str,
        borrower: str,
        amount: int,
        token: str,
        duration: float,
        interest_rate: int,
    ) -> LoanAgreement:
        """Create and register a new Active agreement.

        Raises:
            LoanError: If the terms are invalid or lender == borrower.
        """
        if lender == borrower:
            raise LoanError(LoanRejection.INVALID_TERMS, "Lender and borrower must differ")
        try:
            terms = LoanTerms(
                lender=lender,
                borrower=borrower,
                amount=amount,
                token=token,
                duration=duration,
                interest_rate=interest_rate,
                start=self.now(),
            )
        except PydanticValidationError as e:
            raise LoanError(LoanRejection.INVALID_TERMS, str(e)) from e

        agreement = LoanAgreement(len(self._agreements) + 1, terms, self)
        self._agreements.append(agreement)
        logger.info(
            "Loan %d created: %s lends %d %s to %s",
            agreement.loan_id, lender, amount, token, borrower,
        )
        return agreement

    def is_own_agreement(self, caller: object) -> bool:
        """Whether ``caller`` is an agreement this factory created."""
        return any(a is caller for a in self._agreements)

    def update_trust_score(self, caller: object, borrower: str, delta: int) -> int:
        """Adjust a borrower's trust score and return the new value.

        Raises:
            LoanError: If ``caller`` was not created by this factory.
        """
        if not self.is_own_agreement(caller):
            raise LoanError(
                LoanRejection.UNTRUSTED_CALLER,
                "Trust score updates are accepted only from this factory's agreements",
            )
        score = self.trust_score(borrower) + delta
        self._trust_scores[borrower] = score
        logger.debug("Trust score for %s is now %d", borrower, score)
        return score
