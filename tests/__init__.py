"""Unit tests for the batch translation adapter.

This package contains test modules for all components of the adapter and its command-line host.
"""
