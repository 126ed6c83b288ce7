"""Study Planner: single-user task planner with local key-value persistence."""
