#!/usr/bin/env python3
"""Start the Heritage AI server from a source checkout."""

from heritage_ai.main import main

if __name__ == "__main__":
    main()
