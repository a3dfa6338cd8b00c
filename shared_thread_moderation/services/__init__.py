"""Moderation pipeline services."""
