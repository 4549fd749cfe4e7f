"""Core — pure domain logic with zero I/O.

Invariants:
    - Nothing in this package imports SQLAlchemy, FastAPI or the infrastructure package
    - Nothing in this package logs; failures are raised as LoyaltyError subclasses
"""
