"""Batch email verification service."""
