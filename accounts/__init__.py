"""Account identity service - registration, email verification and authentication."""
