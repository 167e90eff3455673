"""Narrative text generation backed by a hosted language model."""
