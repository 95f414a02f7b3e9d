"""Design validator package."""
