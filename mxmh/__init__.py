"""Nested cross-validation benchmark for the Music & Mental Health survey."""
