# camstream

Building blocks for a lightweight MJPEG-over-HTTP video streamer. The
package holds the parts of such a streamer that do not touch capture
hardware: safe handling of request paths, MIME type guessing, lookup of
static files, listening sockets, a pool of worker threads with frame
pacing, and the command-line option set with its help text.

It depends on nothing outside the standard library and supports
Python 3.10 and later.

## What is inside

| Module | Purpose |
| --- | --- |
| `camstream.httppath` | `simplify_request_path(path)` collapses `//`, `/./` and `/../`, drops leading spaces and never lets `..` climb above the root. |
| `camstream.mime` | `guess_mime_type(path)` maps a file extension (case-insensitive) to a content type, falling back to `application/misc`. |
| `camstream.static` | `find_static_file_path(root_path, request_path)` resolves a request to a readable regular file under a root directory, trying `index.html` for directories. Symlinks at the requested path are not followed. Returns `None` when there is nothing to serve. |
| `camstream.uri` | `uri_get_true(params, key)` and `uri_get_string(params, key)` read a flag (`1…`, `true`, `yes`) and a percent-encoded string from query parameters, given as a mapping or as `(name, value)` pairs; names match case-insensitively. |
| `camstream.bev` | The `BufferEvent` flag enum and `format_event_reason(what, error_code)`, which renders an event as `"<error text> (reading,eof)"` and the like. |
| `camstream.sockets` | `bind_unix(path, rm, mode)` creates a non-blocking listening UNIX socket; `bind_systemd(environ)` takes the first socket passed by socket activation (`LISTEN_PID`/`LISTEN_FDS`). Failures raise `SocketBindError`. |
| `camstream.workers` | `Worker` and `WorkersPool`: a fixed set of threads, each running one job at a time. `wait()` returns the idle worker with the newest result and marks whether it is timely, `assign()` starts it, `get_fluency_delay()` gives the pause before the next frame. The pool is a context manager; `close()` stops and joins the threads. |
| `camstream.options` | `parse_options(argv)` returns an `Action` and an `Options` dataclass; helpers `parse_resolution`, `parse_number` and `check_instance_id`. Bad input raises `OptionsError`. |
| `camstream.helptext` | `render_help(options, version)` and `render_features(features)` produce the help text and the feature listing. |

## Examples

Normalising request paths:

```python
from camstream.httppath import simplify_request_path

simplify_request_path("/abc/../xyz")              # "/xyz"
simplify_request_path("../../../etc/passwd")      # "/etc/passwd"
simplify_request_path("abc/./xyz/..")             # "abc/"
```

Guessing a content type:

```python
from camstream.mime import guess_mime_type

guess_mime_type("index.html")    # "text/html"
guess_mime_type("stream.JPG")    # "image/jpeg"
guess_mime_type("archive.tar/")  # "application/misc"
```

Parsing command-line options:

```python
from camstream.helptext import render_help
from camstream.options import Action, OptionsError, parse_options

try:
    action, options = parse_options(["--resolution", "1280x720", "--port", "8080"])
except OptionsError as exc:
    print(exc)
else:
    if action is Action.HELP:
        print(render_help(options, "0.1.0"))
    else:
        print(options.width, options.height, options.port)  # 1280 720 8080
```

`--help`, `--version` and `--features` stop parsing and come back as
`Action.HELP`, `Action.VERSION` and `Action.FEATURES`.

Running jobs on a worker pool:

```python
from camstream.workers import WorkersPool

def encode(worker):
    worker.job["result"] = bytes(reversed(worker.job["frame"]))
    return True

with WorkersPool("JPEG", "jpeg", 2, 0.0, dict, encode) as pool:
    worker = pool.wait()
    delay = pool.get_fluency_delay(worker)
    worker.job["frame"] = b"frame"
    pool.assign(worker)
```

## What it does not do

The package does not capture video, encode frames or run an HTTP server,
and it installs no command. It provides the pieces such a program is built
from: it parses and documents the options, but acting on them is left to
the caller.

## Tests

The test suite uses pytest, available through the `test` extra.