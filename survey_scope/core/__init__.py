"""Planning engine stages (Qt-free except for the planner session)."""
