"""CLI entry point - wrapper for running from a checkout

Imports and runs the main CLI from the modular cli package.
"""

from cli.main import main

if __name__ == "__main__":
    main()
