"""
Task Tracker package.

A personal task list stored in a single JSON file, served over a FastAPI
REST API (`task_tracker.main`) and a typer CLI (`task_tracker.cli`).
"""

__version__ = "1.0.0"
