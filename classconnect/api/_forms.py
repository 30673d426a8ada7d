"""Helpers for multipart routes."""

from typing import List, Optional

from fastapi import UploadFile


def merge_uploads(*groups: Optional[List[UploadFile]]) -> List[UploadFile]:
    """Files sent as ``name`` and ``name[]`` end up in one list."""

    merged: List[UploadFile] = []
    for group in groups:
        if group:
            merged.extend(group)
    return merged
