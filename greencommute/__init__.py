"""GreenCommute hazard-aware commute route planning."""
