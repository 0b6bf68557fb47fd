"""
promptslot test suite.

- Queue ordering and cancellation bridging
- Display channels and preemption
- Manager lifecycle, events and metrics
- Helpers and the default manager
"""
