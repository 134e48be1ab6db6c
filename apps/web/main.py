"""FastAPI web application for depbump."""

from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from core.errors import DepbumpError
from core.models import DependencyGroup, UpgradeReport
from core.outdated import upgrade_package_json
from core.resolve_node import NpmResolver

app = FastAPI(
    title="depbump",
    description="Upgrade package.json dependency declarations to the latest versions",
    version="0.1.0",
)


class UpgradeRequest(BaseModel):
    """Request model for upgrading dependencies."""
    content: str
    dev: bool = False
    prod: bool = False
    filter: Optional[str] = None
    target: Optional[str] = None


class UpgradeResponse(BaseModel):
    """Response model for dependency upgrades."""
    current: dict[str, str]
    upgraded: dict[str, str]
    failed: dict[str, str]
    updated_content: str
    has_changes: bool


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the main application page."""
    return INDEX_HTML


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/upgrade", response_model=UpgradeResponse)
async def upgrade_dependencies(request: UpgradeRequest):
    """Upgrade dependencies from package.json content."""
    content = request.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="No content provided")

    try:
        async with NpmResolver() as resolver:
            report = await upgrade_package_json(
                request.content,
                resolver,
                group=DependencyGroup(prod=request.prod, dev=request.dev),
                package_filter=request.filter,
                target=request.target,
            )
    except DepbumpError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing dependencies: {str(e)}")

    return _to_response(report, request.content)


@app.post("/api/upload", response_model=UpgradeResponse)
async def upload_file(
    file: UploadFile = File(...),
    dev: bool = Form(False),
    prod: bool = Form(False),
    filter: Optional[str] = Form(None),
    target: Optional[str] = Form(None),
):
    """Upload and process a package.json file."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        text_content = (await file.read()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")

    request = UpgradeRequest(
        content=text_content, dev=dev, prod=prod, filter=filter, target=target
    )
    return await upgrade_dependencies(request)


def _to_response(report: UpgradeReport, content: str) -> UpgradeResponse:
    return UpgradeResponse(
        current=report.current,
        upgraded=report.upgraded,
        failed=report.failed,
        updated_content=report.updated_content if report.updated_content is not None else content,
        has_changes=report.has_changes,
    )


INDEX_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>depbump - Dependency Upgrader</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
</head>
<body>
    <div class="container py-4">
        <h1 class="display-5 fw-bold text-primary">depbump</h1>
        <p class="lead text-muted">Upgrade package.json dependencies without losing their version style</p>
        <textarea id="manifest" class="form-control font-monospace mb-3" rows="14"
                  placeholder='{"dependencies": {"express": "^4.18.0"}}'></textarea>
        <div class="form-check form-check-inline">
            <input class="form-check-input" type="checkbox" id="greatest">
            <label class="form-check-label" for="greatest">Use greatest published version</label>
        </div>
        <button class="btn btn-primary" onclick="upgrade()">Check for upgrades</button>
        <table class="table mt-4"><tbody id="results"></tbody></table>
        <pre id="updated" class="bg-light p-3"></pre>
    </div>
    <script>
        async function upgrade() {
            const response = await fetch('/api/upgrade', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({
                    content: document.getElementById('manifest').value,
                    target: document.getElementById('greatest').checked ? 'greatest' : 'latest'
                })
            });
            const data = await response.json();
            const rows = document.getElementById('results');
            rows.replaceChildren();
            const addRow = (cells, className) => {
                const row = rows.insertRow();
                if (className) {
                    row.className = className;
                }
                for (const text of cells) {
                    row.insertCell().textContent = text;
                }
                return row;
            };
            if (!response.ok) {
                addRow([data.detail], 'text-danger');
                return;
            }
            for (const [name, version] of Object.entries(data.upgraded)) {
                addRow([name, data.current[name], '→', version]);
            }
            for (const [name, reason] of Object.entries(data.failed)) {
                addRow([name, reason], 'text-warning').cells[1].colSpan = 3;
            }
            document.getElementById('updated').textContent = data.updated_content;
        }
    </script>
</body>
</html>
"""
