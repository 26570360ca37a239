"""CortexOps: compose multi-role Ansible projects from a role selection."""

__version__ = "0.4.0"
