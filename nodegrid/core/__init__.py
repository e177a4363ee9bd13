"""Simulation core for nodegrid.

Modules:
- springs: damped spring step (scalar and numpy)
- easing: easing curves used by the click animation
- grid: spacing and centering of the flat lattice
- chunks: chunked enable/disable patterns
- cube: rounded-cube mapping, mesh and surface layout
- proximity: pointer response curve + planar/surface projections
- entity: one node, its click cycle and entry reveal
- field: flat and cube grid containers
- interaction: pointer/touch routing into activations and edit painting
- cycler: staggered color cycling
- cursor: pointer follower marker
- config: field settings and presets
"""
