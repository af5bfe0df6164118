"""TUI integration tests for git-pr-rebase.

Run with pytest:
    pytest tests/tui_integration/
"""
