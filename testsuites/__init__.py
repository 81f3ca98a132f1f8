"""
Test suites package.

`testsuites` is importable so that:
  - the harness framework (`testsuites.api_testing.framework`) can be reused
    by other API test projects
  - `run_tests.py` can validate configuration before invoking pytest

No real secrets live here; JWT_SECRET comes from the environment.
"""
