"""Ability-based authorization for FastAPI applications.

Users hold named abilities (actions) directly or through roles; restricted
endpoints assert the abilities they need. A configured super-user passes
every check.
"""

__version__ = "0.1.0"
