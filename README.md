# sarah

Building blocks for chat bots: chat-service-neutral input and output
messages, per-plugin configuration locks, a cron-style task scheduler and
an adapter for Gitter rooms. The package has no dependencies outside the
standard library.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Inputs and outputs

`sarah.input.Input` is a protocol for incoming messages. An input has
`sender_key`, `message`, `sent_at` and `reply_to`. A request for help or
for cancelling the current conversation is wrapped with `new_help_input` or
`new_abort_input`. Each returns a frozen `HelpInput` or `AbortInput` that
copies the original's fields and keeps the original as `original_input`.

`sarah.output.OutputMessage` pairs a `destination` with a `content`
payload. `new_output_message(destination, content)` creates one.

```python
from sarah.input import new_help_input
from sarah.output import new_output_message

help_input = new_help_input(incoming)
reply = new_output_message(help_input.reply_to, "Available commands: ...")
```

## Configuration locks

`sarah.locker.ConfigLocker.get(bot_type, plugin_id)` returns one
`ReadWriteLock` for each bot type and plugin identifier. It creates the lock
on first use and hands out the same lock after that. A `ReadWriteLock` can
be held by many readers or by one writer. Waiting writers are served before
new readers. Use `read_locked()` and `write_locked()` as context managers,
or the matching `acquire_*` and `release_*` methods. The module also
provides a shared instance, `config_locker`.

## Scheduling tasks

`sarah.cron.parse_schedule(spec)` accepts the following schedules:

- five-field cron expressions (minute, hour, day of month, month, day of
  week) with lists, ranges, steps and month or weekday names;
- the descriptors `@yearly`, `@annually`, `@monthly`, `@weekly`, `@daily`,
  `@midnight` and `@hourly`;
- intervals such as `@every 1m30s`.

A `TZ=` or `CRON_TZ=` prefix sets a time zone for the schedule. The function
returns a `CronSchedule` or an `IntervalSchedule`. Both have a
`next_after(moment)` method. It raises `ScheduleError` when the spec is
invalid.

`sarah.scheduler.run_scheduler(location)` starts a `TaskScheduler`. It
works out schedules in the given time zone, or in local time when none is
given, and runs due functions on background threads. A task is any object
with `identifier` and `schedule` attributes. `update(bot_type, task, fn)`
registers `fn` for the task and replaces any earlier entry for the same
bot type and identifier. An empty or unparsable schedule raises
`ScheduleError`. `remove(bot_type, task_id)` drops an entry and ignores
unknown ones. `entries()` maps each `(bot_type, task_id)` to its next run,
soonest first. `stop()` ends the scheduler. A scheduler can also be used as
a context manager. `CronLogAdapter` writes the scheduler's events as
`message, key=value, ...` log lines.

```python
from dataclasses import dataclass
from datetime import timezone
from sarah.scheduler import run_scheduler

@dataclass
class Task:
    identifier: str
    schedule: str

task = Task("greeting", "@every 1m")
scheduler = run_scheduler(timezone.utc)
scheduler.update("gitter", task, lambda: print("tick"))
print(scheduler.entries())
scheduler.remove("gitter", task.identifier)
scheduler.stop()
```

## Gitter

`sarah.gitter.adapter.Adapter` is built from a `sarah.gitter.config.Config`,
which holds a `token` and a `retry_policy`. The default policy is 10 trials,
0.5 seconds apart. The REST and streaming clients can be passed in, which
helps in tests. The adapter works as follows:

- `run(stop_event, enqueue_input, notify_err)` fetches the rooms the
  token's owner belongs to, retrying by the policy. If that fails, it
  passes a `RoomsFetchError` to `notify_err`. Otherwise it starts one
  background thread per room.
- Each room thread (`run_each_room`) connects over the streaming API, also
  retrying by the policy. It passes every received `RoomMessage` to
  `enqueue_input`, skips blank keep-alive lines and malformed payloads, and
  reconnects after a disconnect until `stop_event` is set. If the policy's
  trials run out while connecting, the thread stops.
- `send_message(output)` posts text content to a `Room` destination through
  `RestAPIClient.post_message`. Other content or destinations are logged and
  ignored.

```python
import threading
from sarah.gitter.adapter import Adapter
from sarah.gitter.config import Config

config = Config(token="token")
adapter = Adapter(config)
stop = threading.Event()
adapter.run(stop, enqueue_input=print, notify_err=print)
```

Setting `stop` ends the listening loops.

Lower-level pieces:

- `sarah.gitter.rest.RestAPIClient` provides `get`, `post`, `rooms` and
  `post_message`. Failures raise `RestAPIError`. HTTP status codes are not
  checked; the body is decoded as it is.
- `sarah.gitter.streaming.StreamingAPIClient.connect(room)` returns a
  `StreamConnection`.
- `sarah.gitter.connection.decode_payload` turns one stream line into a
  `Message`. It raises `EmptyPayloadError` for a blank line and
  `MalformedPayloadError` for an unusable one.
- `sarah.gitter.payload` holds `Room`, `User`, `Message`, `Mention`,
  `Issue` and `TimeStamp`, each with `from_dict`/`to_dict` (or
  `from_text`/`to_text`).

## What this package does not do

There is no bot runtime here. Nothing runs registered bots, dispatches
inputs to commands, supervises bot errors or sends alerts. There is also no
worker pool, no storage for users' conversational context, and no watcher
that reloads plugin configuration. The package provides the pieces listed
above. Connecting them into a running bot is left to the caller.