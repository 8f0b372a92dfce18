"""placectl - placement rule checker and rewriter for keyspace write-node migration."""

__version__ = "0.1.0"
