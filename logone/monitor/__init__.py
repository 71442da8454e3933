"""logone terminal monitor.

Modules
-------
renderer
    ``MonitorRenderer`` turns progress, transcript and message requests
    into Rich renderables, styled from a single ``(kind, sub_type)``
    table.
"""
