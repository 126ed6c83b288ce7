"""
Task subsystem.

Components:
- task_models.py: data structures (Task, ReminderTime) + JSON record codec
- task_store.py: whole-collection storage on a key-value PreferenceStore
- task_api.py: query / by-id helpers over a task list snapshot
- reminders.py: one-shot "due for notification" check
"""
