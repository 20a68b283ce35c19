"""
kpm-transport CLI
=================

Command-line interface for KPM quantum transport.

Usage:
    kpm-transport info
    kpm-transport run INPUT_DIR --output-dir results/
    kpm-transport dos INPUT_DIR
    kpm-transport chain -L 1000 -M 400 --msd

Architecture:
    cli/
    ├── __init__.py       # This file - app definition
    ├── commands/         # Individual command modules
    │   ├── info.py
    │   ├── run.py
    │   ├── dos.py
    │   └── chain.py
    └── utils.py          # Shared utilities
"""

import typer

# Create CLI app
app = typer.Typer(
    name="kpm-transport",
    help="Linear-scaling quantum transport with the Kernel Polynomial Method",
    add_completion=False,
)


# =============================================================================
# Register Commands
# =============================================================================

from .commands import info, run, dos, chain

app.command()(info)
app.command()(run)
app.command()(dos)
app.command()(chain)


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
