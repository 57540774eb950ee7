"""
Top-level package for the skin catalog search service.

This package loads a normalised snapshot of the weapon-skin catalog,
turns free-text queries into name predicates, scores and ranks the
matching items, and serves paginated results over a small FastAPI
app.  There are no side-effects on import; the catalog is only read
when the app starts or the CLI runs.
"""
