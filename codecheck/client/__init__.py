"""Client-side orchestration: application state, coordinators and facade."""
