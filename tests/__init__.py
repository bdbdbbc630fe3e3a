# tests/__init__.py
"""
Test Suite for the Story Contextualizer.

Organization:
- `core`: domain models and the translation engine, pure and in-memory.
- `adapters`: filesystem repositories against `tmp_path` JSON fixtures.
"""
