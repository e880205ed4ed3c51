"""Employee directory core: comparators, cascading sort, criteria, filters."""
