"""
Configuration file for pytest.
This file ensures the project root is in the Python path.
"""

import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
