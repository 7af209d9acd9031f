# redisbarrier

A barrier shared between processes, kept in Redis. A fixed number of
parties each call `wait()`. Every call blocks until the last party arrives,
and then all of them continue together. Any thread or process that can reach
the same Redis server and uses the same barrier key can take part.

## Installation

```
pip install redisbarrier
```

The tests also need pytest:

```
pip install "redisbarrier[test]"
```

## Usage

```python
import redis
from redisbarrier.barrier import RedisBarrier, BrokenBarrierError

client = redis.Redis(host="localhost", port=6379, db=0)

barrier = RedisBarrier(client, "my_barrier", 3, 30.0)

try:
    barrier.wait()
except BrokenBarrierError:
    print("the barrier was reset or broken")

print("all parties have arrived")
```

`RedisBarrier(client, barrier_key, parties, timeout, action=None)`:

- `client`: a `redis.Redis` client.
- `barrier_key`: the key that holds the arrival counter. Release tokens are
  pushed to `<barrier_key>:release`. Both names are available as the
  `barrier_key` and `release_key` properties.
- `parties`: how many parties must arrive. A value of zero or less raises
  `ValueError`.
- `timeout`: seconds, as a number or a `datetime.timedelta`. It sets the
  expiry of the counter key (rounded to whole seconds, at least one) and how
  long a waiting party blocks for its release token. A timeout of zero or
  less makes waiting parties block without limit.
- `action`: an optional callable with no arguments. The last party to arrive
  runs it before releasing the others.

`RedisBarrier` implements the abstract `Barrier` class from the same module.

### Barrier action

```python
def checkpoint():
    print("everyone is here")

barrier = RedisBarrier(client, "action_barrier", 2, 30.0, checkpoint)
```

If the action raises, `wait()` re-raises that exception, the barrier becomes
broken, and the waiting parties are released.

### Errors

- `BrokenBarrierError`: the barrier was already broken when `wait()` was
  called, or it was broken while this party waited. It is a subclass of
  `threading.BrokenBarrierError`.
- `BarrierTimeoutError`: no release token arrived within the timeout. It is
  a subclass of `TimeoutError`.
- `BarrierCancelledError`: the cancel event was set (see below).
- Errors from the Redis client, such as a refused connection, pass through
  unchanged.

### Cancelling a wait

`wait()` takes an optional `threading.Event`. If it is already set, `wait()`
raises `BarrierCancelledError` at once. If it becomes set while the party is
waiting, the call raises `BarrierCancelledError` and the barrier is broken.

```python
import threading

cancel = threading.Event()
barrier.wait(cancel)
```

### Inspecting and resetting

- `barrier.parties`: the number of parties needed to trip the barrier.
- `barrier.number_waiting()`: the current value of the counter key, or `0`
  if the key is missing or Redis cannot be reached.
- `barrier.broken`: whether this barrier object is in the broken state.
- `barrier.reset()`: breaks the barrier, pushes release tokens for the
  waiting parties, and deletes both keys. Parties waiting through the same
  `RedisBarrier` object then get `BrokenBarrierError`.

## Limits

The broken state is kept on the `RedisBarrier` object, not in Redis. A party
in another process that is woken by a reset, a cancellation or a failed
action receives a release token and returns from `wait()` normally. Once an
object is broken it stays broken; create a new `RedisBarrier` to use the key
again.

## Demo

A walkthrough of plain use, an action, and a reset runs against a Redis
server, `localhost:6379` database 0 unless told otherwise:

```
redisbarrier-demo
redisbarrier-demo --host localhost --port 6379 --db 0
```

The first example waits for three parties at `my_barrier`, so the demo goes
on only when two other parties join that key within 30 seconds. The same
walkthrough can be run from code with `redisbarrier.demo.run_demo(client, out)`,
which writes its output to the text stream `out`.