"""
Main entry point - runs the command line console
"""

from indexer_console.cli import main

if __name__ == "__main__":
    main()
