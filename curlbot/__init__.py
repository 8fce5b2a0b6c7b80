"""
curlbot - Digital curling thinking engine

A turn-based client for the line-delimited JSON curling protocol.
The client connects to a match server and provides:
- Protocol handshake and turn sequencing
- Game state and move models
- A stone stepper and shot-noise models for rollouts
- A planner that picks hit or draw shots from simulated trials
"""

__version__ = "0.1.0"
