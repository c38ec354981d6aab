"""Domain-level policies and business rules.

This package contains logic that defines *what* the business rules are
(totals arithmetic, post-approval protection, identifier shapes),
independent from *where* they are applied (services, event handlers, etc.).
"""
