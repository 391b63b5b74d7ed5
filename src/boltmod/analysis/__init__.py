"""Analysis: multi-file module resolution."""
