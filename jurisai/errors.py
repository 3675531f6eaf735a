"""Error types raised by the pipeline and its collaborators"""


class JurisError(Exception):
    """Base class for all JurisAI errors"""


class ActionValidationError(JurisError, ValueError):
    """Input rejected locally, before any external call is made"""


class CollaboratorError(JurisError, RuntimeError):
    """An external collaborator (store, model, file ingestion) failed"""


class StorageError(CollaboratorError):
    """Entity store read or write failed"""


class RecordNotFoundError(StorageError, LookupError):
    """A required record does not exist"""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} '{record_id}' not found")


class VersionConflictError(StorageError):
    """Another save already took this (matter_id, version_number)"""


class GenerationError(CollaboratorError):
    """Generative model invocation failed or returned an unusable reply"""


class IngestionError(CollaboratorError):
    """File upload or text extraction failed"""


class UnsavedChangesError(JurisError):
    """Closing the workspace would discard an unsaved generation result"""
