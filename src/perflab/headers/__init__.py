"""
=============================================================================
HEADER OPTIMIZATION DEMO
=============================================================================

    ┌──────────────┐   one request per connection   ┌──────────────────┐
    │ HeaderDemo-  │ ─────────────────────────────► │ HeaderDemoServer │
    │ Client       │ ◄───────────────────────────── │                  │
    └──────────────┘   reply, then FIN              └──────────────────┘
            │                                               │
            └──────────── shared DemoState (mode) ──────────┘

    modes.py     HeaderMode (FULL, MINIMAL, COMPRESSED, CACHED)
    wire.py      HTTP/2-style frame for the compressed mode
    server.py    reply selection
    client.py    request building and measurement
    analysis.py  offline size table for every mode

=============================================================================
"""

from .modes import HeaderMode, KEY_LEARNINGS, analysis_notes
from .wire import encode_frame, decode_frame, is_compressed_frame
from .server import HeaderDemoServer
from .client import HeaderDemoClient, build_request
from .analysis import compare_modes, render_comparison

__all__ = [
    "HeaderMode",
    "KEY_LEARNINGS",
    "analysis_notes",
    "encode_frame",
    "decode_frame",
    "is_compressed_frame",
    "HeaderDemoServer",
    "HeaderDemoClient",
    "build_request",
    "compare_modes",
    "render_comparison",
]
