"""
The PRE layer contains the inputs of an analysis.
Material constants, the mesh and the model text parser live here.
"""
