"""Interactive GitHub branch-protection editor."""
