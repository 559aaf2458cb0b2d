"""
GST Kernel

Shared foundation of the tax & reconciliation engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Decimal-only domain value objects
- SQLAlchemy persistence behind the RecordStore protocol
"""

__version__ = "0.1.0"
