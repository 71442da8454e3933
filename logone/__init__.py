"""logone: condense a nix/cargo build event stream into one progress line.

Reads ``@nix`` internal-json and ``@cargo`` events from stdin and turns
them into:
  - a live aggregate progress line with the crates currently compiling
  - per-derivation build transcripts, shown according to verbosity
  - failure attribution that ties error messages back to a single unit
"""

__version__ = "0.1.0"

from logone.config import LogoneConfig
from logone.core.decoder import decode_line
from logone.routing.router import Router

__all__ = ["LogoneConfig", "Router", "decode_line", "__version__"]
