"""
Scanner state and lifecycle.

Holds the per-scanner mutable state (pending queues, debounce timer,
observer handle), the explicit observer and debounce state machines, and
the counters describing scanner activity.
"""
