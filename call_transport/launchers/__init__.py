"""
Transport launchers package.

One launcher per transport; the negotiator dispatches exactly one of them.
"""

from call_transport.launchers.legacy import LegacyCallLauncher
from call_transport.launchers.modern import AriWebRtcSessionStarter, ModernCallLauncher

__all__ = [
    "LegacyCallLauncher",
    "ModernCallLauncher",
    "AriWebRtcSessionStarter",
]
