"""Conversation practice scenarios and progress."""
