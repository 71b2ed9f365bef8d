"""Request access, password hashing and logging shared by the HTTP layer."""
