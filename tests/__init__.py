"""
Test suite for the window configurator.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_wizard_service.py -v
"""
