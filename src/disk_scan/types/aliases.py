"""Type aliases using modern PEP 695 syntax."""

# Literal entry names or full path strings to skip at the top level
# Immutable for the run so it can be shared by every task without locking
type ExclusionSet = frozenset[str]
