"""Tests for the bundled examples."""
