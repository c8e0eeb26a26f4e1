import os
import sys
from pathlib import Path

# Tests never talk to Redis or upstream services unless a test wires that up itself.
os.environ.setdefault("CACHE_ENABLED", "0")
os.environ.setdefault("LOAD_ON_STARTUP", "0")

# Ensure the flat app modules are importable for direct pytest runs
APP_ROOT = Path(__file__).resolve().parents[1] / "app"
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))
