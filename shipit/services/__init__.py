"""Release pipeline services: extraction, validation, GitHub checks and tagging."""
