"""Concrete inference backends and artifact stores.

Backend modules defer their heavy imports (mlx_lm, litellm) to call time,
so importing this package never touches the GPU or the network.
"""

from agrivoice.backends.local_server import LitellmBackend
from agrivoice.backends.mlx import MlxBackend
from agrivoice.backends.storage import HubBlobCache, JsonKeyValueStore

__all__ = ["HubBlobCache", "JsonKeyValueStore", "LitellmBackend", "MlxBackend"]
