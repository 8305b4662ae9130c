"""Select-driven TCP servers, a chat relay, a CGI runner and a configuration checker."""

__version__ = "0.1.0"