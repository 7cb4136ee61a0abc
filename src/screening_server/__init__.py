"""screening_server — FastAPI REST API for the screening SDK.

Exposes the ScreeningPipeline over HTTP with session management,
section-by-section navigation, report rendering, stateless rule
evaluation and reference data endpoints.
"""
