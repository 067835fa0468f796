"""
QuakeBot Test Suite
===================

Test Organization
-----------------
- tests/unit/          : Fast unit tests with mocks (no external dependencies)
- tests/integration/   : Tests against a real database or a local HTTP server

Testing Philosophy
------------------
- Unit tests: fast, isolated, test parsing, scoring and routing
- Integration tests: real SQLite files, a PostgreSQL testcontainer when
  Docker is available, and aiohttp's test server for the leaderboard client
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
