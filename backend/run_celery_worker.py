#!/usr/bin/env python3
# backend/run_celery_worker.py
"""
Development Celery worker runner.
Runs the worker with an embedded beat scheduler so the expired booking
sweep fires locally.
"""
from pathlib import Path
import os
import subprocess
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

if __name__ == "__main__":
    queues = os.getenv("CELERY_QUEUES") or "bookings,celery"
    print(f"🚀 Starting Celery worker, consuming queues: {queues}")

    cmd = [
        sys.executable,
        "-m",
        "celery",
        "-A",
        "guidebook.tasks.celery_app",
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=2",
        "-Q",
        queues,
    ]
    sys.exit(subprocess.call(cmd))
