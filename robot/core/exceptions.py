class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""


class DocumentReadError(PipelineError):
    """Raised when the text of a document cannot be extracted."""


class DocumentDiscoveryError(PipelineError):
    """Raised when the input directory cannot be enumerated. Aborts the batch."""


class RegistryLookupError(PipelineError):
    """Raised when the fleet registry backend fails to answer a lookup."""


class PersistenceError(PipelineError):
    """Raised when a service order cannot be written to the store."""
