#!/usr/bin/env python3
"""Benchmark the object KV store.

Usage: python3 scripts/bench.py [--config PATH] [--count N] [--rounds R] [op ...]

Ops: set, get, del, scan, clear (default: all). Each op runs against a
fresh set of `count` keys and the namespace is cleared afterwards, so
point `basepath` at a scratch prefix.
"""
import argparse
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from objkv_lib.config.config import load_config  # noqa: E402
from objkv_lib.logging_config import configure_logging  # noqa: E402
from objkv_lib.storage import create_store  # noqa: E402

OPS = ('set', 'get', 'del', 'scan', 'clear')


def key_values(count, prefix=''):
    # Keys are the decimal index; values count down so each one is checkable.
    return [(f"{prefix}{i}", str(count - i).encode()) for i in range(count)]


def fill(store, kvs):
    for k, v in kvs:
        store.set(k, v)


def bench_set(store, kvs):
    start = time.perf_counter()
    fill(store, kvs)
    return time.perf_counter() - start, len(kvs)


def bench_get(store, kvs):
    fill(store, kvs)
    start = time.perf_counter()
    for k, _ in kvs:
        store.get(k)
    return time.perf_counter() - start, len(kvs)


def bench_del(store, kvs):
    fill(store, kvs)
    start = time.perf_counter()
    for k, _ in kvs:
        store.delete(k)
    return time.perf_counter() - start, len(kvs)


def bench_scan(store, kvs):
    fill(store, [(f"folder1/{k}", v) for k, v in kvs])
    start = time.perf_counter()
    keys = store.scan('folder1/', '11', '20')
    return time.perf_counter() - start, len(keys)


def bench_clear(store, kvs):
    fill(store, kvs)
    start = time.perf_counter()
    removed = store.clear()
    return time.perf_counter() - start, removed


BENCHES = {
    'set': bench_set,
    'get': bench_get,
    'del': bench_del,
    'scan': bench_scan,
    'clear': bench_clear,
}


def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument('ops', nargs='*', help=f"ops to run, any of {', '.join(OPS)} (default: all)")
    p.add_argument('--config', type=Path, default=None, help='store YAML config')
    p.add_argument('--count', type=int, default=200, help='keys per round')
    p.add_argument('--rounds', type=int, default=3)
    args = p.parse_args(argv)
    unknown = [op for op in args.ops if op not in OPS]
    if unknown:
        p.error(f"unknown op(s): {', '.join(unknown)}")

    configure_logging(args.config)
    cfg = load_config(args.config)
    store = create_store(cfg)
    print(f"Benchmarking {store!r}")

    kvs = key_values(args.count)
    with store:
        for op in args.ops or OPS:
            best = None
            items = 0
            for _ in range(args.rounds):
                elapsed, items = BENCHES[op](store, kvs)
                store.clear()
                best = elapsed if best is None else min(best, elapsed)
            per_item = best / items * 1e6 if items else 0.0
            print(f"{op:6s} best {best * 1000:9.2f} ms  items {items:5d}  {per_item:9.1f} us/item")
    return 0


if __name__ == '__main__':
    sys.exit(main())
