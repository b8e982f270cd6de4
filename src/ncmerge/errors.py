# src/ncmerge/errors.py


class NCMergeError(Exception):
    """Base class for errors that abort a validate/preview/merge request."""


class EmptyInputError(NCMergeError):
    def __init__(self, message: str = "No files to merge"):
        super().__init__(message)


class InvalidFileError(NCMergeError):
    def __init__(self, filename: str, message: str = None):
        self.filename = filename
        super().__init__(message or f"{filename} does not appear to be a valid NC file")


class TemplateNotFoundError(NCMergeError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown template '{name}'")
