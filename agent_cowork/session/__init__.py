"""Session state: registry of backend sessions and the saved-prompt library."""
