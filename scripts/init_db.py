#!/usr/bin/env python
"""Initialize the PromptPulse database."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()


def main():
    """Create data directory and database tables."""
    print("Initializing PromptPulse database...")

    data_dir = project_root / "data"
    data_dir.mkdir(exist_ok=True)
    print(f"Data directory: {data_dir}")

    from db.database import init_db

    init_db()

    print("\n✓ Database initialization complete!")
    print("\nNext steps:")
    print("  1. Set YOUTUBE_API_KEY in .env to enable YouTube")
    print("  2. Run a batch: python scripts/run_pipeline.py run")
    print("  3. Start the API: uvicorn api.main:app --reload")


if __name__ == "__main__":
    main()
