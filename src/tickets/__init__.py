"""
Ticket Lifecycle Module
=======================

Bounded context for ISP support tickets.

Responsibilities:
- Compute due dates from the category SLA when a ticket is created
- Validate status, priority and category on every write
- Escalate tickets (priority bump, reassignment, audit comment)
- Keep the append-only comment log per ticket
- Maintain the category catalog
- Provide overdue detection and dashboard aggregates
"""

__version__ = "1.0.0"
