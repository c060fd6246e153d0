from fastapi import APIRouter, HTTPException, Query
from pathlib import Path
from typing import List

from scopelint.config import LintConfig
from scopelint.models import LintRequest, LintResponse, RuleInfo
from scopelint.services import analysis
from scopelint.services.errors import ConfigurationError
from scopelint.services.linter import Linter, to_lint_message
from scopelint.services.rules.registry import list_rules

router = APIRouter(prefix="/api/lint", tags=["lint"])

# Relative paths in queries resolve against the directory the server was started in.
ROOT_PATH = Path.cwd()


def _resolve(path: str) -> Path:
    target = Path(path)
    if not target.is_absolute():
        target = ROOT_PATH / target
    if not target.exists():
        raise HTTPException(status_code=404, detail="Path not found")
    return target


def _build_linter(config: LintConfig) -> Linter:
    try:
        return Linter(config)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/rules", response_model=List[RuleInfo])
async def get_rules():
    return [
        RuleInfo(
            id=rule.id,
            description=rule.description,
            fixable=rule.fixable,
            messages=dict(rule.messages),
        )
        for rule in list_rules()
    ]


@router.post("", response_model=LintResponse)
async def lint_source(request: LintRequest):
    """
    Lint a source text sent in the request body.
    """
    linter = _build_linter(request.config)
    diagnostics = linter.lint_source(request.source, request.filename)
    return LintResponse(
        filename=request.filename,
        messages=[to_lint_message(d) for d in diagnostics],
    )


@router.get("/file", response_model=LintResponse)
async def lint_file(path: str = Query(..., description="File to lint")):
    target = _resolve(path)
    if not target.is_file():
        raise HTTPException(status_code=400, detail="Path is not a file")
    return analysis.lint_file(_build_linter(LintConfig()), target)


@router.get("/path", response_model=List[LintResponse])
async def lint_path(path: str = None):
    """
    Lint every source file under a directory (defaults to the server root).
    """
    target = _resolve(path) if path else ROOT_PATH
    try:
        return analysis.lint_path(target)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
