from dataclasses import dataclass
from typing import List

VALIDATION_PROBLEM = "https://example.com/problems/validation-error"
DOMAIN_PROBLEM = "https://example.com/problems/domain-error"


@dataclass
class DomainError(Exception):
    detail: str
    title: str = "Domain Error"
    type: str = DOMAIN_PROBLEM
    errors: List[dict] | None = None


@dataclass
class SubmissionValidationError(DomainError):
    detail: str = "Invalid data"
    title: str = "Validation Error"
    type: str = VALIDATION_PROBLEM


class PersistenceError(Exception):
    """The record store rejected or failed an insert."""
