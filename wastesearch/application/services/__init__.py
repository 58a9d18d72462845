"""Pure application services of the search pipeline."""
