"""
Test suite for Order Reconciliation.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_product_matcher.py -v
"""
