"""Unit tests for core domain logic."""
