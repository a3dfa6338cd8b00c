"""Test suite for the Shared Thread moderation engine."""
