"""
The ANALYSIS layer holds the estimator and its building blocks.
It has NO knowledge of spatial search structures or point-cloud files:
neighbor ids and oriented points are handed in by the caller.
"""
