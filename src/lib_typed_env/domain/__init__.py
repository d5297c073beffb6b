"""Domain layer: errors, paths, scalar aliases and type inspection (no I/O)."""
