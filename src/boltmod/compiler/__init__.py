"""Compiler driver and output serialization."""
