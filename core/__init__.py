"""Core module - ERP-neutral building blocks.

This module contains the domain models, configuration, caching and
observability components. It is intentionally ERP-agnostic.

ERP-specific logic (SAP, Oracle, synthetic data) belongs in /connectors/.
"""

__version__ = "1.0.0"
