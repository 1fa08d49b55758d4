"""
Shared building blocks for the API.

`core/` holds what every feature package uses: the asyncpg pool (`db`), table
registration (`schema`) and HTTP error mapping (`errors`). Feature SQL and
business rules live in their own packages (`children/`, `reindeer/`, `auth/`).
"""
