from typing import Optional


class CollageError(Exception):
    """Base class for every error the collage core reports."""


class InvalidFileTypeError(CollageError):
    def __init__(self, file_name: str):
        super().__init__(f"Invalid file type. File name: {file_name}")
        self.file_name = file_name


class DecodeError(CollageError):
    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Could not decode '{file_name}': {reason}")
        self.file_name = file_name
        self.reason = reason


class DocumentImportError(CollageError):
    """An import document failed validation.

    The whole batch is rejected; ``document_index``, ``record_index`` and
    ``field`` locate the first offending value (any of them may be None when
    the problem is at a coarser level).
    """

    def __init__(self, message: str, document_index: int,
                 record_index: Optional[int] = None, field: Optional[str] = None):
        self.message = message
        self.document_index = document_index
        self.record_index = record_index
        self.field = field
        super().__init__(self._describe())

    def _describe(self) -> str:
        location = f"Document {self.document_index}"
        if self.record_index is not None:
            location += f", sprite {self.record_index}"
        if self.field is not None:
            location += f", field '{self.field}'"
        return f"{location}: {self.message}"


class MalformedDocumentError(DocumentImportError):
    pass


class UnknownImageReferenceError(DocumentImportError):
    pass


class AspectRatioMismatchError(DocumentImportError):
    pass
