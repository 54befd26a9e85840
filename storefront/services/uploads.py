"""Uploaded file helpers"""

from dataclasses import dataclass


@dataclass
class UploadedFile:
    """A file received from a form"""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def file_extension(filename: str, default: str = "bin") -> str:
    if "." not in filename:
        return default
    return filename.rsplit(".", 1)[-1].lower() or default
