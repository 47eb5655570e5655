"""
The ANALYSIS layer contains the model data structures.
Nodes, per-DOF values and the finite element formulation, no solving.
"""
