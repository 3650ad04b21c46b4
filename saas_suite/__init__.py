"""
SaaS Suite

Multi-tenant business suite: one API serving hotel, brewery, restaurant,
beauty salon and retail store tenants. All tenant data goes through the
tenant-scoped repository in core/scoping.py.
"""

__version__ = "1.0.0"
