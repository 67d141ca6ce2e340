"""Collaborators: version control and package toolchain."""
