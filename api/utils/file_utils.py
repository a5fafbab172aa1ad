"""File handling utilities."""
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile


def save_upload_file(upload: UploadFile, target_dir: Path, max_size: int | None = None) -> Path:
    """Save uploaded file to target directory under a collision-free name."""
    target_dir.mkdir(parents=True, exist_ok=True)
    data = upload.file.read()
    if max_size is not None and len(data) > max_size:
        raise HTTPException(status_code=413, detail="文件过大")
    safe_name = Path(upload.filename or "upload.txt").name
    candidate = target_dir / safe_name
    if candidate.exists():
        suffix = candidate.suffix
        candidate = target_dir / f"{candidate.stem}_{uuid.uuid4().hex[:8]}{suffix}"
    candidate.write_bytes(data)
    return candidate
