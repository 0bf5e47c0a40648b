"""
High-level use cases for the users API.

Each service module orchestrates repositories to implement business rules
(email uniqueness, partial updates, lookups). Routers call these services
instead of touching the JSON file directly.
"""
