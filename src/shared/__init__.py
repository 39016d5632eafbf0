"""
Shared Kernel Module
====================

Shared infrastructure used by the bounded contexts (currently Tickets).

Architecture Pattern: Modular Monolith
- Each module (tickets) is a bounded context
- Shared kernel contains only generic infrastructure: logging,
  middleware and the static permission check

DO NOT add ticket business logic to the shared kernel.
"""

__version__ = "1.0.0"
