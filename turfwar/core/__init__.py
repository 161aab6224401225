"""
Core domain models, geodesic primitives, contracts and logging.

This module contains the foundational building blocks that are independent
of external collaborators (location provider, storage, change feed).
"""
