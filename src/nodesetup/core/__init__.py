"""Core node setup functionality."""
