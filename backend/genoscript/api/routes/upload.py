from fastapi import APIRouter, File, UploadFile, HTTPException

from genoscript.schemas.conversion import LocalFile

router = APIRouter()

ACCEPTED_EXTENSIONS = (".vcf", ".vcf.gz", ".csv", ".txt")

_CHUNK_SIZE = 1024 * 1024


@router.post("/", response_model=LocalFile)
async def upload_input_file(file: UploadFile = File(...)):
    """
    Register a local input file and return its descriptor.

    - **file**: VCF, CSV or TXT file. Only the name and size are recorded;
      the contents are not parsed.
    """
    if not file.filename or not file.filename.lower().endswith(ACCEPTED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Please upload a .vcf, .vcf.gz, .csv or .txt file.",
        )

    size = 0
    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)

    return LocalFile(name=file.filename, size_bytes=size)
