"""rest api for caseboard."""
