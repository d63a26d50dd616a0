import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import uvicorn


def parse_args():
    parser = argparse.ArgumentParser(description="Run the inventory API server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes.")
    return parser.parse_args()


def main():
    args = parse_args()
    uvicorn.run("inventory_api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
