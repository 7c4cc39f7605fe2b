"""Command line interface modules.

This package provides the ``socks-relay`` command:
- Starting the threaded SOCKS5 server
- Configuring logging
- Reporting session statistics on shutdown
"""
