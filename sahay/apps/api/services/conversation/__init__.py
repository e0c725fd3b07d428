"""Mitra conversation pipeline."""
