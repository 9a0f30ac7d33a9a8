"""Shared process and configuration helpers."""
