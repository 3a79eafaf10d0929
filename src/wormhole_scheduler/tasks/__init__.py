"""
Task subsystem.

Components:
- task_models.py: data structures (Task, SchedulerState)
- schedule.py: wormhole table builder (Schedule)
- task_scheduler.py: single-timer runtime that replays the table
"""
