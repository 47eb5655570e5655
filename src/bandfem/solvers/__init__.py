"""
The SOLVERS layer turns a model into displacements and nodal forces.
Band storage of the stiffness matrix, its assembly, the elimination of
prescribed displacements and the preconditioned linear solve live here.
"""
