"""
Stock Kernel

Shared foundation for the breakdown and purchase-costing library:
- Measurement model (five tracking types, unit symbols)
- Typed failures for business outcomes, typed exceptions for misuse
- Structured JSON logging
- SQLAlchemy base and engine helpers for the reference repositories
"""

__version__ = "0.1.0"
