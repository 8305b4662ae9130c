"""Run a PHP CGI script and collect what it prints."""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Mapping, Sequence

CGI_BUFFER_SIZE = 100
CMD_PHP = "/usr/bin/php"
ERROR_500 = "Internal Server ERROR 500\n"
CGI_OUTPUT_FILE = "new.txt"
DEFAULT_SCRIPT = "cgi_test.php"

_ENV_NAMES = (
    "CONTENT_TYPE",
    "CONTENT_LENGTH",
    "HTTP_COOKIE",
    "HTTP_USER_AGENT",
    "PATH_INFO",
    "QUERY_STRING",
    "REMOTE_ADDR",
    "REMOTE_HOST",
    "REQUEST_METHOD",
    "SCRIPT_FILENAME",
    "SCRIPT_NAME",
    "SERVER_SOFTWARE",
)


def default_environment() -> dict[str, str]:
    """The CGI variables handed to a script, all empty."""
    return {name: "" for name in _ENV_NAMES}


def environment_entries(env: Mapping[str, str]) -> list[str]:
    """Render variables as NAME=value strings, ordered by name."""
    return [f"{name}={value}" for name, value in sorted(env.items())]


class CgiHandler:
    """Runs scripts through an interpreter, capturing output via a file."""

    def __init__(
        self,
        interpreter: str = CMD_PHP,
        output_file: str | os.PathLike = CGI_OUTPUT_FILE,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.interpreter = interpreter
        self.output_file = output_file
        self.env = default_environment() if env is None else dict(env)

    def execute(self, file_name: str) -> str:
        """Run the script and return its output, or the 500 message on failure."""
        env = dict(entry.split("=", 1) for entry in environment_entries(self.env))
        try:
            # Opened without truncation: a shorter output leaves older bytes behind.
            fd = os.open(self.output_file, os.O_WRONLY | os.O_CREAT, 0o777)
        except OSError:
            return ERROR_500
        try:
            subprocess.run(
                ["php", file_name],
                executable=self.interpreter,
                env=env,
                stdout=fd,
                check=False,
            )
        except OSError:
            return ERROR_500
        finally:
            os.close(fd)
        try:
            with open(self.output_file, "rb") as handle:
                data = handle.read()
        except OSError:
            return ERROR_500
        return data.decode("utf-8", errors="replace")


def main(argv: Sequence[str] | None = None) -> int:
    """Run a CGI script (cgi_test.php unless named) and print its output."""
    args = list(sys.argv[1:] if argv is None else argv)
    file_name = args[0] if args else DEFAULT_SCRIPT
    print(CgiHandler().execute(file_name))
    return 0


if __name__ == "__main__":
    sys.exit(main())