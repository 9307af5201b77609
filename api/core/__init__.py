"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, the soft-delete store, the operation registry).
Keep resource-specific schemas and logic in the corresponding feature package
(e.g. `prompts/`).
"""
