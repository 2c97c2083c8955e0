"""Fleet architecture map: dependency graphs over a fleet of Go repositories."""
