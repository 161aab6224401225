"""
Test suite for turfwar

Contains:
- tests/unit/          : Unit tests for individual modules and the session
"""
