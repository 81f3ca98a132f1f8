"""End-to-end API test suites and the harness framework."""
