"""Test suite for formrules.

This package contains tests for:
- Path accessor (dot-path reads, writes and joins)
- Rule tree construction and normalization
- Message resolution and default message layers
- Validation engine (emptiness, skipping, test chains, stop policies, fan-out)
- ObjectValidator (state publication, atomicity, overrides)
"""
