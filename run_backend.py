#!/usr/bin/env python
"""Script to run the Task Manager API server."""
import sys
from pathlib import Path

# Add the project directory to Python path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from task_api.main import run

if __name__ == "__main__":
    run()
