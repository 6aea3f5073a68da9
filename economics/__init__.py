"""Unit-economics calculation engine."""
