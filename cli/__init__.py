"""Command-line benchmarks for kdtreex."""
