from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure `import course_catalog...` works when running pytest from the backend directory.
BACKEND_ROOT = Path(__file__).resolve().parent
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

# Human-readable logs in test output.
os.environ.setdefault("LOG_FORMAT", "text")
