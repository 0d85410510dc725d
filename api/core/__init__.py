"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks every feature uses (DB wiring, settings,
logging, the response envelope). Feature-specific SQL and business logic live
in the corresponding feature package (e.g. `forms/`, `reviews/`).
"""
