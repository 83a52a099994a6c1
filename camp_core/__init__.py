# =============================================================================
# camp_core/__init__.py
# Election Camp Directory core package
# =============================================================================

__version__ = "1.0.0"
