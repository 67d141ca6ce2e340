"""External command, git, manifest and file helpers."""
