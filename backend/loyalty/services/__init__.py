"""Services — shell operations that run core rules inside one AsyncSession unit of work.

Invariants:
    - Each public write operation ends in exactly one commit or raises
    - Expected unique violations are translated to domain errors before leaving a service
    - Services never log: failures are returned to the boundary as LoyaltyError
"""
