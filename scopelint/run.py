import argparse
import os

import uvicorn


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the CLI.

    Serves the lint API with the given path (default: current directory) as
    the root that relative lint paths resolve against.
    """
    parser = argparse.ArgumentParser(
        prog="scopelint-server",
        description=(
            "Scope-aware JavaScript/TypeScript lint server. "
            "By default, lints paths relative to the current working directory."
        ),
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Root directory for lint requests (default: current directory).",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface to bind the server to (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000).",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Server log level (default: info).",
    )

    args = parser.parse_args(argv)

    target_path = os.path.abspath(args.path)
    if not os.path.isdir(target_path):
        raise SystemExit(f"Directory does not exist: {target_path}")

    # The router captures the working directory as its root at import time.
    os.chdir(target_path)
    print(f"📂 Linting root: {target_path}")

    url = f"http://{args.host}:{args.port}"
    print(f"🚀 Starting server at {url}")
    print("   Press Ctrl+C to stop.")

    uvicorn.run(
        "scopelint.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
