"""Entry point for 'python -m authgate' command.

This module allows the AuthGate CLI to be invoked using
'python -m authgate'.
"""

from authgate.cli import main

if __name__ == "__main__":
    main()
