"""Runtime services (telemetry) shared by every nim_mode component."""
