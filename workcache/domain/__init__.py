"""Domain Layer: interfaces (ports), value objects and cache models.

Has no dependencies on infrastructure code.
"""
