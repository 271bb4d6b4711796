import base64
import hashlib
import io
from datetime import date
from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Query

from .config import get_settings
from .encoding import decode_upload
from .models import ConvertResponse, HealthResponse
from .pipeline import output_name
from .rules import OUTPUT_ENCODING, OUT_DATE_FORMAT
from .sites import detect_site_from_text
from .transform import LineTransformer
from .utils import validate_out_date

app = FastAPI(
    title="esker-csv",
    description="Plant CSV export date normalization for the ESKER feed",
    version="0.1.0",
)

settings = get_settings()
transformer = LineTransformer(settings.cols_with_time, settings.cols_date_only)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/convert", response_model=ConvertResponse)
async def convert_csv(
    file: UploadFile = File(...),
    out_date: Optional[str] = Query(default=None, description="YYYY-MM-DD, defaults to today"),
):
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    if out_date is None:
        out_date = date.today().strftime(OUT_DATE_FORMAT)
    try:
        validate_out_date(out_date)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"out_date must be YYYY-MM-DD, got {out_date!r}")

    raw = await file.read()
    text, enc = decode_upload(raw)
    lines = [line.rstrip("\r\n") for line in io.StringIO(text, newline="")]

    site = detect_site_from_text(file.filename, lines, settings.default_site)
    out_lines, tally = transformer.transform_lines(lines)

    body = "".join(line + settings.line_terminator for line in out_lines).encode(OUTPUT_ENCODING)
    return {
        "site": site,
        "source_encoding": enc.detected,
        "converted_csv": {
            "filename": output_name(site, out_date),
            "sha256": hashlib.sha256(body).hexdigest(),
            "encoding": OUTPUT_ENCODING,
            "content_b64": base64.b64encode(body).decode("ascii"),
        },
        "lines": {
            "total": tally.total,
            "changed": tally.changed,
            "unchanged": tally.unchanged,
        },
    }
