"""Rich rendering of comparison snapshots."""
