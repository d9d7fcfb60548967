"""
Tests package for Workforce Risk.

This package contains tests for:
- Career classification, scoring, salary and company summaries
- Workforce and narrative clients
- Assessment and chat orchestration
- API endpoints (test_api.py)

Run tests with:
    pytest tests/

Or run specific test files:
    pytest tests/test_scoring.py -v
"""
