# ============================================================================
# warden/__init__.py
# Worker session supervisor
# ============================================================================
#
# PURPOSE:
# Launches worker processes on behalf of callers, captures their output into
# structured telemetry (statistics, findings, raw output) and tracks each
# process until it exits.
#
# PACKAGES:
# - base: configuration and logging setup
# - toolkit: worker argument schema, executable resolution, output classifier
# - engine: session supervisor, completion tracking, session registry
# - server: FastAPI transport over the registry
#
