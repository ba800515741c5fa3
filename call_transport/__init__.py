"""
Outbound call transport negotiation.

Chooses between the legacy SIP transport and the modern WebRTC transport
for each outbound call, based on the local preference and a fresh remote
capability lookup.
"""

__version__ = "1.0.0"
