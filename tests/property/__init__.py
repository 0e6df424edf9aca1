"""Property-based tests using Hypothesis.

These tests use generative testing to explore edge cases:
- Layered options merging with arbitrary option sets
- Rate-limit duration parsing and ISO 8601 rendering

To run property tests:
    pytest tests/property/ -v --hypothesis-show-statistics

Requires:
    hypothesis>=6.100.0
"""
