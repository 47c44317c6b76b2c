"""Run the log cleanup batch once (no HTTP).

Deletes every log record not flagged do_not_delete.
Exit: 0 if every chunk succeeded, 2 otherwise (argparse also exits 2 on bad arguments).

Supported invocation from repo root:
  python scripts/run_log_cleanup.py [--chunk-size N]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.batch import run_batch  # noqa: E402
from core.config import MAX_CLEANUP_CHUNK_SIZE  # noqa: E402
from features.log_cleanup import LogCleanupBatch  # noqa: E402


def _chunk_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if not 1 <= size <= MAX_CLEANUP_CHUNK_SIZE:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_CLEANUP_CHUNK_SIZE}, got {size}")
    return size


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Purge log records not flagged do_not_delete.")
    parser.add_argument("--chunk-size", type=_chunk_size, default=None)
    args = parser.parse_args(argv)

    result = run_batch(LogCleanupBatch(), chunk_size=args.chunk_size)
    print(json.dumps(result.as_dict(), sort_keys=True))
    return 0 if result.chunks_failed == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
