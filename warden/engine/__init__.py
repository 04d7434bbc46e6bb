# ============================================================================
# warden/engine/__init__.py
# Session supervision engine
# ============================================================================
#
# MODULES IN THIS PACKAGE:
# - models.py: telemetry records and session snapshots
# - supervisor.py: one child process, its capture tasks and completion waiter
# - rwlock.py: reader/writer lock for the session map
# - registry.py: concurrency-safe session registry (create/stop/get/list)
#
# WORKFLOW:
# create(client, argv) -> validate -> spawn supervisor -> register
# -> stdout/stderr readers + completion waiter feed session telemetry
# -> get/list return snapshots, stop forwards SIGTERM
#
