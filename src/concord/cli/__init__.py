"""Click command-line interface for Concord."""
