"""Errors raised to callers of the identity binder, DNA generator and fraud registry."""


class Web3DNAError(Exception):
    """Base class for Web3DNA errors."""


class EmptyKeyError(Web3DNAError, ValueError):
    """Keyed digest requested with an empty secret where a key is required."""


class MissingIdentityFieldError(Web3DNAError, ValueError):
    """A required identity attribute was not supplied."""
    
    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Missing identity field: {field_name}")


class DuplicateFraudIdError(Web3DNAError, ValueError):
    """A fraud signature was submitted with an id that is already stored."""
    
    def __init__(self, fraud_id: str):
        self.fraud_id = fraud_id
        super().__init__(f"Fraud id already registered: {fraud_id}")
