"""Document access control engine: policy-based admission for protected documents."""

__version__ = "1.0.0"
