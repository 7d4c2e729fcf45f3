"""
Survey Quota Backend Package.

FastAPI service layer for Australian survey quota management: plans
demographic quota structures, stores them per project, and tracks line item
allocations as completes arrive.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Quota planner, persistence, tracking and generator client
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
