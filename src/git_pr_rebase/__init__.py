"""git-pr-rebase: rebase a pull request onto its target branch and push it back."""

__version__ = "0.1.0"
