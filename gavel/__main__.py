"""Run the Gavel backend: ``python -m gavel [--port 8001]``."""

import argparse

import uvicorn

BACKEND_PORT = 8001


def main() -> None:
    parser = argparse.ArgumentParser(description="Gavel debate game backend")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=BACKEND_PORT)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("gavel.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
