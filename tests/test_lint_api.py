from pathlib import Path

from fastapi.testclient import TestClient

from scopelint.main import app


def _client() -> TestClient:
    return TestClient(app)


def test_list_rules() -> None:
    resp = _client().get("/api/lint/rules")

    assert resp.status_code == 200
    rules = {r["id"]: r for r in resp.json()}
    assert set(rules) == {
        "block-scoped-var",
        "no-undef",
        "handle-callback-err",
        "require-await",
        "implicit-arrow-linebreak",
    }
    assert rules["implicit-arrow-linebreak"]["fixable"] is True
    assert rules["no-undef"]["messages"]["undef"] == "'{name}' is not defined."


def test_lint_posted_source() -> None:
    resp = _client().post(
        "/api/lint",
        json={
            "source": "if (typeof x !== 'undefined') {}",
            "config": {"rules": {"no-undef": [{"typeof": True}]}},
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"] == "input.js"
    assert [m["message"] for m in body["messages"]] == ["'x' is not defined."]
    assert body["messages"][0]["startOffset"] == 11


def test_lint_posted_source_bad_config() -> None:
    resp = _client().post(
        "/api/lint",
        json={"source": "x;", "config": {"rules": {"handle-callback-err": ["^("]}}},
    )

    assert resp.status_code == 400


def test_lint_file(tmp_path: Path) -> None:
    src = tmp_path / "cb.js"
    src.write_text("function f(err) { doSomething(); }\n", encoding="utf-8")

    resp = _client().get("/api/lint/file", params={"path": str(src)})

    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"] == str(src)
    assert sorted(m["ruleId"] for m in body["messages"]) == ["handle-callback-err", "no-undef"]


def test_lint_file_not_found(tmp_path: Path) -> None:
    resp = _client().get("/api/lint/file", params={"path": str(tmp_path / "missing.js")})

    assert resp.status_code == 404


def test_lint_file_rejects_directory(tmp_path: Path) -> None:
    resp = _client().get("/api/lint/file", params={"path": str(tmp_path)})

    assert resp.status_code == 400


def test_lint_path(tmp_path: Path) -> None:
    (tmp_path / "a.js").write_text("undeclared;\n", encoding="utf-8")
    (tmp_path / "b.ts").write_text("export const ok = 1;\n", encoding="utf-8")
    (tmp_path / "notes.md").write_text("not code\n", encoding="utf-8")

    resp = _client().get("/api/lint/path", params={"path": str(tmp_path)})

    assert resp.status_code == 200
    results = {Path(r["filename"]).name: r for r in resp.json()}
    assert set(results) == {"a.js", "b.ts"}
    assert [m["message"] for m in results["a.js"]["messages"]] == ["'undeclared' is not defined."]
    assert results["b.ts"]["messages"] == []


def test_api_status() -> None:
    resp = _client().get("/api-status")

    assert resp.status_code == 200
