"""Authentication and authorization core for the applicant-tracking services."""
