"""Versioned JSON Schemas for model descriptor files.

Schemas live in ``<version>/<name>.json`` and are loaded through
``model_validation.models.json_schema_loader``.
"""
