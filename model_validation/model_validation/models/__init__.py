"""Metadata, declared types and descriptor parsing."""
