"""Grammar practice: topic tests, scoring and attempt history."""
