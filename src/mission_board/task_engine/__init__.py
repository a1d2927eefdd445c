"""Task-state engine for the mission board.

This package provides the task model, the persistence gateways, the
authoritative :class:`~mission_board.task_engine.store.TaskStore` and the
pure view projector that derives the active worklist and the archive.
"""
