"""vnforge - context selection and story skeletons for branching visual novels."""

__version__ = "0.1.0"
