"""Loan agreements issued by a trust-scoring factory."""

from lunchpoll.loans.agreement import LoanAgreement
from lunchpoll.loans.factory import LoanFactory

__all__ = ["LoanAgreement", "LoanFactory"]
