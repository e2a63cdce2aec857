"""
Main entry point for running the client as a module.

Usage:
    python -m haproxy_runtime --socket unix:///var/run/haproxy/admin.sock stat
    python -m haproxy_runtime servers-state app
    python -m haproxy_runtime maintenance app web01 --timeout 30
"""

from .cli import cli

if __name__ == "__main__":
    cli()
