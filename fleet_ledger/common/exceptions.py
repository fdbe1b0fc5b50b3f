class NotFoundError(ValueError):
    """A referenced record does not exist. Routes map this to 404."""
