"""Platform-free shell core: settings, timers, idle and flash orchestration."""
