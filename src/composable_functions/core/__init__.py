"""Core data types for composable-functions.

The Result model and the failure normalizer live here; everything else in
the library is built on top of them.
"""
