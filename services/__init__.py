"""Purchase-to-mint pipeline services."""
