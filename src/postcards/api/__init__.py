"""Postcard Creator — FastAPI REST API layer.

This package contains the FastAPI application, the Pydantic request/response
models, and the prompt compilation logic.

Modules
-------
main
    Application factory, route handlers and the ``main()`` CLI entry point.
models
    Pydantic models for API request and response validation.
prompt_builder
    Text sanitisation and postcard prompt template compilation.
"""
