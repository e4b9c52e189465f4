"""Validation package."""

from hisaab.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
