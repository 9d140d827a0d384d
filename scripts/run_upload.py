# scripts/run_upload.py
"""
Run the trip record uploader from a source checkout

    python scripts/run_upload.py --config ./config.json
"""

import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from trip_ingest.cli import main


if __name__ == '__main__':
    sys.exit(main())
