"""Hit a running relay end to end: resolve a file id, then pull the first bytes of each quality.

    python scripts/smoke_stream.py <google-drive-file-id> [base-url]
"""
import json
import sys
import time

import requests

file_id = sys.argv[1]
base = sys.argv[2] if len(sys.argv) > 2 else "http://127.0.0.1:8000"

start = time.time()
r = requests.get(f"{base}/api/get-video", params={"file_id": file_id}, timeout=60)
d = r.json()
print(f"Resolve: HTTP {r.status_code} in {time.time() - start:.1f}s")
print(json.dumps(d, indent=2)[:500])
if d.get("status") != "ok":
    sys.exit(1)

slug = d["data"]["slug"]
for quality in ("360", "720", "1080"):
    start = time.time()
    with requests.get(f"{base}/stream/{slug}/{quality}", headers={"Range": "bytes=0-1023"},
                      stream=True, timeout=60) as s:
        head = next(s.iter_content(1024), b"")
        print(f"{quality}p: HTTP {s.status_code} {s.headers.get('content-type')} "
              f"{s.headers.get('content-range') or s.headers.get('content-length')} "
              f"({len(head)} bytes in {time.time() - start:.1f}s)")
