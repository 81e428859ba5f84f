"""Utility modules for mpybox."""
