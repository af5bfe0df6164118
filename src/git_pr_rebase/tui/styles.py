"""CSS styles for git-pr-rebase TUI components."""

CONFIRM_CSS = """
Screen {
    align: center middle;
}

#confirm-container {
    width: 60;
    height: auto;
    padding: 1 2;
    border: thick $primary;
    background: $surface;
}

#confirm-question {
    text-align: center;
    text-style: bold;
    margin-bottom: 1;
}

#confirm-detail {
    text-align: center;
    color: $text-muted;
    margin-bottom: 1;
}

#confirm-buttons {
    height: 3;
    align: center middle;
}

#confirm-buttons Button {
    margin: 0 1;
}
"""
