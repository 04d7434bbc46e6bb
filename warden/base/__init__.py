# ============================================================================
# warden/base/__init__.py
# Foundational components the rest of the package depends on.
# ============================================================================
#
# - config.py: environment-driven configuration and logging setup
#
