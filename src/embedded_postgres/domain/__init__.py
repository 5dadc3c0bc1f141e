"""Domain layer: versions, paths, process status and reuse rules."""
