"""Layout sidecar: HTTP adapter around a layered graph layout engine (ELK).

Accepts a node/edge/port description, translates it to ELK JSON, runs the
engine under a deadline and returns absolute coordinates for nodes, ports
and orthogonal edge routes.
"""

__version__ = "0.1.0"
