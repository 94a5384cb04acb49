"""terminal ui for caseboard."""
