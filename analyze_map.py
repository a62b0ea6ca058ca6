"""Print the contents and size breakdown of an ld64 link map."""
import argparse
import json
import logging
import sys

from linkmap import parse_linkmap
from linkmap.report import human, object_file_sizes, section_totals, top_symbols, total_size


def positive_int(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {text}")
    return value


def print_entries(linkmap):
    print(f"path : {linkmap.path}")
    print(f"arch : {linkmap.arch}")
    print("object files:")
    for f in linkmap.object_files:
        print(f"  [{f.index:3d}] {f.path}")
    print("sections:")
    for s in linkmap.sections:
        print(f"  0x{s.address:08X} 0x{s.size:08X} {s.segment} {s.section}")
    print("symbols:")
    for sym in linkmap.symbols:
        print(f"  0x{sym.address:08X} 0x{sym.size:08X} [{sym.file_index:3d}] {sym.name}")
    print("dead_stripped_symbols:")
    for sym in linkmap.dead_stripped_symbols:
        print(f"  <<dead>>   0x{sym.size:08X} [{sym.file_index:3d}] {sym.name}")


def print_summary(linkmap, top=20):
    print("\n=== SECTION SIZES ===")
    total = 0
    for segment, section, size in section_totals(linkmap):
        print(f"{size:10d} bytes ({human(size):>10s}): {segment},{section}")
        total += size
    print(f"{total:10d} bytes total ({human(total)})")

    print(f"\n=== TOP {top} SYMBOLS ===")
    for sym in top_symbols(linkmap, top):
        print(f"{sym.size:8d} bytes: {sym.name}")

    print(f"\n=== TOP {top} OBJECT FILES ===")
    for path, size in object_file_sizes(linkmap)[:top]:
        print(f"{size:8d} bytes ({human(size):>10s}): {path}")

    dead = total_size(linkmap.dead_stripped_symbols)
    print(f"\nDead stripped: {len(linkmap.dead_stripped_symbols)} symbols, {human(dead)}")


def analyze_map(filename, demangle=True, as_json=False, top=20):
    linkmap = parse_linkmap(filename, demangle=demangle)
    if as_json:
        print(json.dumps(linkmap.to_dict(), indent=2))
        return linkmap
    print_entries(linkmap)
    print_summary(linkmap, top=top)
    return linkmap


def main(argv=None):
    parser = argparse.ArgumentParser(description="ld64 link map analyzer")
    parser.add_argument("linkmap", help="Link map written by ld -map")
    parser.add_argument("--no-demangle", action="store_true", help="Keep symbol names mangled")
    parser.add_argument("--json", action="store_true", help="Dump the parsed link map as JSON")
    parser.add_argument("-n", "--top", type=positive_int, default=20, help="Top N entries (default: 20)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser diagnostics")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        analyze_map(args.linkmap, demangle=not args.no_demangle, as_json=args.json, top=args.top)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
