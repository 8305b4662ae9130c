# selectserv

This package holds small TCP servers that each run a single `select()`
loop. It also has some of the pieces that sit next to a web server: a
CGI runner, and a parser and checker for nginx-style configuration files.

It needs only the standard library and targets POSIX systems.

## Installing

```
pip install .
```

To run the tests, install the `test` extra:

```
pip install ".[test]"
pytest
```

## Commands

### Two-room chat relay

```
selectserv-chatroom PORT_A PORT_B
```

The relay listens on two ports on all interfaces. A client that connects
on the first port joins room A, and a client on the second port joins
room B. Whatever a client sends is passed on, unchanged, to every other
client in the same room. Each connection and each disconnection is
logged to standard output.

With any number of arguments other than two, the command prints a usage
line to standard error and exits with status 1. A port argument is read
leniently: leading digits count, and text that does not start with a
number counts as 0.

From Python:

```python
from selectserv.chatroom import ChatServer, Room

with ChatServer([6667, 6668], "127.0.0.1") as server:
    print(server.addresses())   # [(host, port) of room A, (host, port) of room B]
    server.serve_forever()
```

- `poll(timeout)` runs one round of the loop. It returns how many sockets
  were ready, which lets another loop or a test stay in control.
- `parse_ports(argv)` turns the two arguments into ports.
- `Room` lists the rooms.

### Echo server

```
selectserv-echo
```

A non-blocking server on port 12345 (IPv6, all interfaces). It drains
every readable connection and sends back each chunk it receives. It
stops, and closes every socket, when nothing happens for three minutes
or when accepting a connection fails.

```python
from selectserv.echo_server import EchoServer

server = EchoServer(12345, "::", 180)
print(server.address())
server.serve()
```

If the host has no `:` in it, an IPv4 socket is used.

### Multi-client server

```
selectserv-multi
```

The server listens on port 8080 and tracks up to 30 clients. When a new
client connects, it reads that client's first request in full and logs
it. The server waits until 100000 bytes have arrived or the client stops
sending. After that, whatever a client sends is echoed back up to the
first NUL byte, and a disconnection is logged.

```python
from selectserv.multi_server import MultiClientServer

with MultiClientServer(8080, "0.0.0.0", 30) as server:
    server.poll(1.0)
    print(server.requests)   # first requests received so far, as bytes
```

### Test client

```
selectserv-client
```

Connects to `127.0.0.1:8080` and sends `This is Request from one client`
once. From Python, `send_message(message, host, port)` does the same and
returns the number of bytes sent.

### CGI runner

```
selectserv-cgi [SCRIPT]
```

Runs `SCRIPT` (by default `cgi_test.php`) through `/usr/bin/php` and
prints what the script wrote. The script gets an environment of empty
CGI variables such as `REQUEST_METHOD`, `QUERY_STRING` and
`SCRIPT_NAME`.

From Python:

```python
from selectserv.cgi import CgiHandler, default_environment

handler = CgiHandler("/usr/bin/php", "new.txt", default_environment())
body = handler.execute("cgi_test.php")
```

- Output goes through the file given as `output_file`, which is
  `new.txt` by default. That file is not truncated first, so a shorter
  output leaves older bytes at its end.
- If the output file cannot be opened, or the interpreter cannot be
  started, `execute` returns `Internal Server ERROR 500\n`.
- `environment_entries(env)` renders variables as `NAME=value` strings
  sorted by name.

### Configuration checker

```
selectserv-check-config [CONFIG_FILE]
```

Reads a configuration file made of `server { ... }` and
`location ... { ... }` blocks. If no file is named, it reads
`./config_files/default.conf`. The checker makes sure that every
directive is known and that it appears at an allowed depth, inside an
allowed block.

- `server` belongs at the top level.
- `listen`, `server_name` and `location` belong directly inside
  `server`.
- `index`, `root`, `autoindex`, `error_page`, `method`,
  `client_max_body_size`, `cgi` and `cgi_pass` belong inside `server` or
  `location`.

On success, the command prints the configuration back out and exits
with status 0. A missing file, a syntax error or a misplaced directive
each print a message and exit with status 1.

```
server {
    listen 8080;
    server_name example.com;
    location / {
        root ./www;
        index index.html;
    }
}
```

From Python:

```python
from selectserv.config_tree import parse_config_file
from selectserv.directives import default_rules, validate_tree

root = parse_config_file("default.conf")
names = validate_tree(root, default_rules())
print(root.render())
```

Parsing and checking raise these errors:

- `parse_config_text` and `parse_config_file` raise `ConfigSyntaxError`
  when braces do not match or a block has no name.
- `validate_tree` and `check_directive` raise `InvalidDirectiveError`
  when a directive is unknown or appears where it is not allowed.

`validate_config_file(path)` parses and checks in one step. `Node` gives
access to the tree through `direct_children_map()`,
`direct_children_list()`, `children_by_full_name(key)` and
`children_by_first_name(name)`. `DirectiveRule` lets you build your own
rules.

## What it does not do

The package has no HTTP server:

- None of the servers parses HTTP requests or builds HTTP responses.
- The configuration checker only validates a file. Nothing uses it to
  start servers, serve files from `root`, or route requests to the CGI
  runner.
- The `Listen` and `ErrorPage` data classes are plain records that no
  code fills in.