"""
Session-backed todo lists package.

The FastAPI application lives in src.session_lists.main (app, create_app); the
list and todo rules live in src.session_lists.store.
"""
