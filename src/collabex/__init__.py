"""CollabEx backend API."""
