"""Reusable adapters shared by Sahay apps."""
