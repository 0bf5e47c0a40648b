"""
Core utilities shared across the users API.

This package hosts configuration helpers (env vars, storage paths) and
cross-cutting concerns such as logging setup. Routers and services depend
on these primitives instead of reading the environment themselves.
"""
