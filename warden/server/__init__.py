# warden/server/__init__.py
# HTTP transport (FastAPI) over the session registry.
