"""
Core logic for the on-demand Minecraft server fleet.

Everything in this package is plain Python with no CDK dependency so it can
be exercised without synthesizing a stack.
"""

__version__ = "1.0.0"
