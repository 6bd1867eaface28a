#!/usr/bin/env python
"""
Run the Catering Pricing API with uvicorn.

Host, port and log level come from Settings (API_HOST, API_PORT, LOG_LEVEL).

Usage:
    python scripts/run_api.py [--reload]
"""
import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
src_path = project_root / 'src'
sys.path.insert(0, str(src_path))

from catering_pricing.config.settings import get_settings


def build_command(settings, reload: bool = False) -> list[str]:
    command = [
        sys.executable, "-m", "uvicorn",
        "catering_pricing.api.main:app",
        "--host", settings.api_host,
        "--port", str(settings.api_port),
        "--log-level", settings.log_level.lower(),
    ]
    if reload:
        command.append("--reload")
    return command


def main():
    settings = get_settings()

    # The uvicorn child imports the app from src
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_path), env.get("PYTHONPATH")]))

    print(f"Starting Catering Pricing API on http://{settings.api_host}:{settings.api_port} (log level {settings.log_level})")
    try:
        subprocess.run(build_command(settings, reload="--reload" in sys.argv[1:]), env=env, cwd=project_root)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
