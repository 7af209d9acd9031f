"""A walk through the barrier: plain use, an action, and a reset."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from typing import Any, Optional, Sequence, TextIO

import redis

from redisbarrier.barrier import BrokenBarrierError, RedisBarrier

_OVERALL_DEADLINE = 35.0


def run_demo(client: Any, out: TextIO) -> None:
    """Run the three examples against ``client``, writing to ``out``."""
    cancel = threading.Event()
    deadline = threading.Timer(_OVERALL_DEADLINE, cancel.set)
    deadline.daemon = True
    deadline.start()
    try:
        if _basic(client, out, cancel):
            _with_action(client, out, cancel)
            _reset_and_state(client, out, cancel)
    finally:
        deadline.cancel()


def _basic(client: Any, out: TextIO, cancel: threading.Event) -> bool:
    print("Example 1: Basic barrier usage", file=out)
    barrier = RedisBarrier(client, "my_barrier", 3, 30.0)
    print("Waiting at barrier...", file=out)
    try:
        barrier.wait(cancel)
    except Exception as exc:
        print(f"Error waiting at barrier: {exc}", file=out)
        return False
    print("All parties have arrived! Proceeding...", file=out)
    return True


def _with_action(client: Any, out: TextIO, cancel: threading.Event) -> None:
    print("\nExample 2: Barrier with action", file=out)
    barrier = RedisBarrier(
        client,
        "action_barrier",
        2,
        30.0,
        lambda: print("Barrier action executed!", file=out),
    )

    def party(ident: int) -> None:
        print(f"Goroutine {ident} waiting at barrier...", file=out)
        try:
            barrier.wait(cancel)
        except Exception as exc:
            print(f"Goroutine {ident} error: {exc}", file=out)
        else:
            print(f"Goroutine {ident} proceeding...", file=out)

    workers = [threading.Thread(target=party, args=(i,)) for i in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()


def _reset_and_state(client: Any, out: TextIO, cancel: threading.Event) -> None:
    print("\nExample 3: Barrier reset and state checking", file=out)
    barrier = RedisBarrier(client, "reset_barrier", 2, 5.0)

    def party() -> None:
        print("Goroutine waiting at barrier...", file=out)
        try:
            barrier.wait(cancel)
        except BrokenBarrierError:
            print("Barrier was reset!", file=out)
        except Exception:
            pass

    worker = threading.Thread(target=party)
    worker.start()

    time.sleep(0.1)
    print(f"Number of waiting parties: {barrier.number_waiting()}", file=out)
    print(f"Total parties required: {barrier.parties}", file=out)
    print("Resetting barrier...", file=out)
    barrier.reset()
    print(f"Is barrier broken? {str(barrier.broken).lower()}", file=out)

    worker.join()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Demonstrate a Redis barrier.")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=6379)
    parser.add_argument("--db", type=int, default=0)
    args = parser.parse_args(argv)

    client = redis.Redis(host=args.host, port=args.port, db=args.db)
    run_demo(client, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())