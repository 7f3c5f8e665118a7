# ==================================================
# examples/build_list.py
# ==================================================
import argparse, sys
from fixed_list import FixedList

def positive_int(text):
    n = int(text)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"count must be positive, got {n}")
    return n

def build(args):
    with FixedList.create(args.path, args.count) as lst:
        for i in range(args.count):
            lst.append(f"value_{i}".encode())
    print(f"wrote {args.count} records to {args.path}")

def dump(args):
    with FixedList.open(args.path) as lst:
        print(f"# size={lst.size} capacity={lst.capacity}")
        for i, record in enumerate(lst):
            print(i, record.decode("utf-8", errors="replace"))

def main(argv=None):
    p = argparse.ArgumentParser()
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="create a list of generated records")
    b.add_argument("path", help="path to list file")
    b.add_argument("count", type=positive_int)
    b.set_defaults(func=build)

    d = sub.add_parser("dump", help="print every record of a list")
    d.add_argument("path", help="path to list file")
    d.set_defaults(func=dump)

    args = p.parse_args(argv)
    args.func(args)
    return 0

if __name__ == "__main__":
    sys.exit(main())
