# contextualizer/core/domain/__init__.py
"""
Domain Entities and Value Objects.

This package defines the core data structures used throughout the application
(markers, stories, country contexts, segments) and is devoid of any
infrastructure logic.
"""
