#!/usr/bin/env python3
"""
Docsmith - Command Line Interface
Runs the tools from a source checkout without installing the package
"""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from docsmith.cli import main


if __name__ == "__main__":
    main()
