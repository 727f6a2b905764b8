"""Data models for cleanup operations."""
