import sys
from pathlib import Path

# project root and backend-api on the import path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))
sys.path.insert(0, str(root_dir / "backend-api"))

from main import app

# Vercel handler
handler = app
