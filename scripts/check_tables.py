import sys

from normconv.core.errors import NormTableError
from normconv.data.registry import build_store
from normconv.engine.constants import COMPOSITE_KEYS

"""
CLI usage:
python -m scripts.check_tables <table_file> [<table_file> ...]
Loads the files exactly as the service would and prints band coverage.
Exit code 1 on usage errors, 2 when a file cannot be loaded,
3 when definitions were skipped.
"""


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.check_tables <table_file> [<table_file> ...]")
        sys.exit(1)
    paths = sys.argv[1:]
    try:
        store = build_store(paths)
    except NormTableError as exc:
        print(f"error: {exc.message}")
        sys.exit(2)
    for band in store.bands:
        sizes = ", ".join(f"{key}={len(store.conversion_table(band.id, key))}" for key in COMPOSITE_KEYS)
        intervals = sum(len(store.interval_table(band.id, key)) for key in COMPOSITE_KEYS)
        print(f"{band.id:<12} {band.min_months:>4}-{band.max_months:<4} {sizes} intervals={intervals}")
    for skipped in store.skipped:
        print(f"skipped #{skipped.position} ({skipped.source or '?'}): {skipped.reason}")
    print(f"Loaded {len(store)} band(s) from {len(paths)} file(s)")
    if store.skipped:
        sys.exit(3)


if __name__ == '__main__':
    main()
