"""
Axis support layer - credential vault and page object introspection.
"""

__version__ = "0.1.0"
