#!/usr/bin/env python3
"""Entry point for remfs CLI when run as python -m remfs.cli."""

if __name__ == "__main__":
    from remfs.cli.main import main

    main()
