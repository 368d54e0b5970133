"""
Core app - Shared abstractions and utilities.

This app provides the pieces every other app relies on:
- The domain error taxonomy (exceptions.DomainError and subclasses)
- The unit-of-work helper used for multi-record writes
"""
