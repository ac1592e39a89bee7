"""
Test suite for the storefront backend.
"""
