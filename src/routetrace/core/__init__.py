"""routetrace core: activity tracking and interaction correlation."""
