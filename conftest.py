import sys
from pathlib import Path

# tests import `worldmap.*` straight from the src layout without an install
SRC = Path(__file__).parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
