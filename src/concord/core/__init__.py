"""Fan-out execution, orchestration and review."""
