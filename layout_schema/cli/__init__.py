"""
Command-line interface module.

This module provides a rich terminal interface for layout-schema using Typer and Rich.

Commands:
    - compile: Compile the schema declared in a layout source
    - inspect: Show declarations, the selected entry point and diagnostics
    - validate: Validate generated content against a layout's schema

Example Usage:
    ```bash
    # Compiled schema as a highlighted panel
    layout-schema compile layouts/TitleCards.tsx

    # Layout record as plain JSON, ready to store
    layout-schema compile layouts/TitleCards.tsx --metadata --raw > title-cards.json

    # Check generated content
    layout-schema validate --json slide.json --source layouts/TitleCards.tsx
    ```
"""

from .main import app

__all__ = ["app"]
