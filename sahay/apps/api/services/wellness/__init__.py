"""Breathing, affirmation and micro-session helpers."""
