"""
Entry point for running virtual-assistant as a module.

Usage: python -m virtual_assistant
"""

from virtual_assistant.cli import main

if __name__ == "__main__":
    main()
