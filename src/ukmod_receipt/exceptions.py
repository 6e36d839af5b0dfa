class PipelineError(Exception):
    """Base class for errors raised by the UKMOD modelling pipeline."""


class LoadError(PipelineError):
    """A scenario file is missing, misnamed, unreadable or malformed."""


class MissingScenarioError(PipelineError):
    """One of the two required policy scenarios is absent for a year."""


class SchemaError(PipelineError):
    """A table lacks required columns or violates a key constraint."""


class RecodeError(PipelineError):
    """A raw code falls outside the domain of a categorical mapping."""
