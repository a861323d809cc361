"""Core Application Layer: the cache manager facade and command handling.

Connects the domain layer with the infrastructure layer through interfaces.
"""
