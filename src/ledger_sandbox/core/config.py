"""
Network Configuration

The network configuration is an opaque cell handed to every contract
execution. The sandbox never interprets it; programs may read whatever
parameters they care about through their execution context. It can be
replaced wholesale at any time, never patched.
"""

from .cells import Cell

NetworkConfig = Cell

DEFAULT_CONFIG_PARAMS = {
    "global_id": -239,
    "workchains": [0],
    "masterchain": -1,
    "max_out_messages": 255,
    "bounce_on_uninit": True,
}

DEFAULT_CONFIG: NetworkConfig = Cell.of_json(DEFAULT_CONFIG_PARAMS)


def default_config() -> NetworkConfig:
    """Configuration blob used when a simulator is created without one."""
    return DEFAULT_CONFIG
