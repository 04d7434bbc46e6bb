# ============================================================================
# warden/toolkit/__init__.py
# Worker integration layer
# ============================================================================
#
# Everything that depends on the worker's external contract lives here:
# - worker_args.py: the worker's command line schema (argv validation)
# - executable.py: how the worker executable is located
# - output_classifier.py: the worker's stdout/stderr line grammar
#
