"""
Test suite for the Order Export Service.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_order_export_service.py -v
"""
