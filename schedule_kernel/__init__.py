"""
Schedule Kernel

Shared foundation for the project scheduling and earned-value engine:
- Calendar-day date arithmetic
- Injectable clock (no ambient "today")
- Typed, coded exceptions
- Structured JSON logging
- Fire-and-forget domain event notifier
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
