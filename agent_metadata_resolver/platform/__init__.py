"""Resolver platform infrastructure module.

This module provides the ambient infrastructure shared by the resolver:
- Environment-driven settings
- Structured logging
- Service constants
"""
