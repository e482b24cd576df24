"""Finds direct reads of generated protobuf message fields in Go code and
proposes getter-based rewrites."""

__version__ = "0.1.0"
