#!/usr/bin/env python3
"""
Smoke test a running MakePDF server.

Uploads one document to the conversion endpoint and writes the converted
file next to it.

Usage: python scripts/smoke_convert.py path/to/document.docx [--url URL]
"""

import argparse
import sys
import time
from pathlib import Path

import requests

BASE_URL = "http://localhost:8000/api/v1"


def check_server_health(base_url: str) -> bool:
    """Check if the server is running and the engine is installed."""
    try:
        response = requests.get(f"{base_url}/ready", timeout=5)
    except requests.exceptions.ConnectionError:
        print("❌ Server is not running. Start it with: uvicorn makepdf.main:app --port 8000")
        return False

    if response.status_code == 200:
        print(f"✅ Server ready, engine at {response.json()['engine']}")
        return True
    print(f"❌ Server not ready: {response.json().get('error')}")
    return False


def convert_file(base_url: str, document: Path) -> bool:
    """Upload a document and save the converted result."""
    print(f"📁 Converting {document} ({document.stat().st_size} bytes)...")
    start = time.time()
    with document.open("rb") as handle:
        response = requests.post(
            f"{base_url}/convert",
            files={"file": (document.name, handle)},
            timeout=300,
        )
    elapsed = time.time() - start

    if response.status_code != 200:
        print(f"❌ Conversion failed with {response.status_code} after {elapsed:.1f}s: {response.text}")
        return False

    output = document.with_suffix(".pdf")
    output.write_bytes(response.content)
    print(f"✅ Wrote {output} ({len(response.content)} bytes) in {elapsed:.1f}s")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("document", type=Path, help="Document to convert")
    parser.add_argument("--url", default=BASE_URL, help="API base URL")
    args = parser.parse_args()

    if not args.document.is_file():
        print(f"❌ Not a file: {args.document}")
        return 1
    if not check_server_health(args.url):
        return 1
    return 0 if convert_file(args.url, args.document) else 1


if __name__ == "__main__":
    sys.exit(main())
