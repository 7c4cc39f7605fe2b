"""Core SOCKS5 proxy implementation.

This package contains the protocol engine and its server wrapper:
- Request/reply codec
- Method negotiation
- Request dispatch and outbound connections
- Full-duplex relay
- Threaded accept loop and statistics

The command-line interface lives in ``socks_relay.cmd`` and only talks to this
package through ``socks_relay.core.proxy``.
"""
