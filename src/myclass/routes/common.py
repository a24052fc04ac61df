from typing import Optional

from fastapi import UploadFile

from ..storage import FileStorage, StagedFile


def stage_upload(storage: FileStorage, field: str, upload: Optional[UploadFile]) -> Optional[StagedFile]:
    """Stage an optional multipart file; an empty file input counts as absent."""
    if upload is None or not upload.filename:
        return None
    return storage.stage(field, upload.file, upload.filename, upload.content_type)
