"""
Row-partitioned distributed matrix multiplication.

The coordinator splits C = A×B into contiguous row ranges, one per worker
process. Each worker computes its rows from its own copies of A and B and
streams them back, unframed, over a dedicated one-way channel. The coordinator
reassembles C and checks it against a serial reference computation.
"""

__all__ = [
    "partitioning",
    "kernel",
    "matrix",
    "codec",
    "verification",
    "channels",
    "workers",
    "coordinator",
]
