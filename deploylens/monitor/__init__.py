"""deploylens monitor — read-only views over classified deployment logs.

Modules
-------
projection
    ``TimelineProjection`` runs the classifier and produces frozen
    ``TimelineSnapshot`` models.
renderer
    ``TimelineRenderer`` turns snapshots and log buffers into Rich
    renderables for terminal display.
"""
