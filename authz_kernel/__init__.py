"""
Authorization Kernel

The decision core for a multi-tenant accounting and consolidation platform:
- Closed action, resource and role vocabularies
- Immutable policy and context value objects
- Typed exceptions with machine-readable codes
- Structured JSON logging
- SQLAlchemy persistence base for policies and the denial audit log
"""

__version__ = "0.1.0"
