"""Opportunity coach: retrieval-backed chat engine with tiered fallbacks."""
